import logging
import os

from flask_login import current_user, login_user

from app.modules.auth.context import AuthContext
from app.modules.auth.models import User
from app.modules.auth.repositories import UserRepository
from app.modules.profile.models import UserProfile, UserType
from app.modules.profile.repositories import UserProfileRepository
from core.configuration.configuration import uploads_folder_name
from core.services.BaseService import BaseService

logger = logging.getLogger(__name__)


class AuthenticationService(BaseService):
    def __init__(self):
        super().__init__(UserRepository())
        self.user_profile_repository = UserProfileRepository()

    def is_email_available(self, email: str) -> bool:
        return self.repository.get_by_email(email) is None

    def create_with_profile(self, **kwargs) -> User:
        display_name = kwargs.pop("display_name", None)
        user_type = kwargs.pop("user_type", None) or UserType.DEVELOPER.value
        email = kwargs.pop("email", None)
        password = kwargs.pop("password", None)

        if not email:
            raise ValueError("Email is required.")
        if not password:
            raise ValueError("Password is required.")
        if not display_name:
            raise ValueError("Display name is required.")

        try:
            user = User(email=email, password=password)
            self.repository.session.add(user)
            self.repository.session.flush()

            profile = UserProfile(user_id=user.id, display_name=display_name, user_type=UserType(user_type))
            self.repository.session.add(profile)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error creating user %s: %s", email, exc)
            self.repository.session.rollback()
            raise
        return user

    def login(self, email, password, remember=True):
        user = self.repository.get_by_email(email)
        if user is not None and user.check_password(password):
            login_user(user, remember=remember)
            return user
        return None

    def get_authenticated_user(self) -> User | None:
        return current_user if current_user.is_authenticated else None

    def get_authenticated_user_profile(self) -> UserProfile | None:
        return current_user.profile if current_user.is_authenticated else None

    def current_context(self) -> AuthContext:
        return AuthContext.from_user(self.get_authenticated_user())

    def temp_folder_by_user(self, user: User) -> str:
        return os.path.join(uploads_folder_name(), "temp", str(user.id))


authentication_service = AuthenticationService()
