from dataclasses import dataclass
from typing import Optional

from core.exceptions import DomainError


class AuthenticationRequired(DomainError, PermissionError):
    status_code = 401


@dataclass(frozen=True)
class AuthContext:
    """Identity handed explicitly to the catalog and upload services.

    An empty ``user_id`` stands for an anonymous visitor.
    """

    user_id: Optional[int] = None
    display_name: str = ""
    user_type: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def from_user(cls, user) -> "AuthContext":
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        profile = getattr(user, "profile", None)
        user_type = profile.user_type.value if profile is not None and profile.user_type else None
        return cls(user_id=user.id, display_name=user.display_name, user_type=user_type)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user(self) -> int:
        if self.user_id is None:
            raise AuthenticationRequired("An authenticated user is required for this operation")
        return self.user_id
