class ApiError(Exception):
    """Base class for failures that map onto an HTTP status."""
    status = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class BadRequest(ApiError):
    status = 400


class Unauthorized(ApiError):
    status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class Forbidden(ApiError):
    status = 403


class NotFound(ApiError):
    status = 404


class Conflict(ApiError):
    status = 409


class InternalError(ApiError):
    status = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
