from app.modules.auth.models import User
from app.modules.profile.models import UserProfile, UserType
from core.seeders.BaseSeeder import BaseSeeder


class AuthSeeder(BaseSeeder):

    priority = 1  # Higher priority

    def run(self):

        users = [
            User(email="user1@yopmail.com", password="1234"),
            User(email="user2@yopmail.com", password="1234"),
            User(email="user3@yopmail.com", password="1234"),
        ]

        # Inserted users with their assigned IDs are returned by `self.seed`.
        seeded_users = self.seed(users)

        profiles = [
            ("Pixel Forge", UserType.DEVELOPER, "Two people making small games."),
            ("Night Owl Studio", UserType.DEVELOPER, ""),
            ("Northwind Publishing", UserType.COMPANY, "Looking for cozy and puzzle games."),
        ]
        user_profiles = [
            UserProfile(user_id=user.id, display_name=name, user_type=user_type, bio=bio)
            for user, (name, user_type, bio) in zip(seeded_users, profiles)
        ]
        self.seed(user_profiles)
