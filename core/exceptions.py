class DomainError(Exception):
    """Base class for errors raised by the storefront services.

    ``status_code`` is the HTTP status the error handler answers with when the
    error escapes a route.
    """

    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {"error": self.__class__.__name__, "message": self.message}
