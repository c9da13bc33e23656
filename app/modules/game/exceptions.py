from core.exceptions import DomainError


class GameNotFound(DomainError, LookupError):
    status_code = 404


class GameAccessDenied(DomainError, PermissionError):
    status_code = 403


class InvalidStatusTransition(DomainError, ValueError):
    status_code = 409

    def __init__(self, current, target):
        super().__init__(f"Cannot move a game from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target
