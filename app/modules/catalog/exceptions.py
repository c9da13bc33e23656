from core.exceptions import DomainError


class InvalidFilterSpec(DomainError, ValueError):
    status_code = 400


class CatalogUnavailable(DomainError, RuntimeError):
    status_code = 503
