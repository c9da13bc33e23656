from app.modules.profile.repositories import UserProfileRepository
from core.services.BaseService import BaseService


class UserProfileService(BaseService):
    def __init__(self):
        super().__init__(UserProfileRepository())

    def get_by_user_id(self, user_id: int):
        return self.repository.get_by_user_id(user_id)

    def update_profile(self, user_profile_id, form):
        if form.validate():
            data = {"display_name": form.display_name.data.strip(), "bio": form.bio.data or ""}
            updated_instance = self.update(user_profile_id, **data)
            return updated_instance, None

        return None, form.errors
