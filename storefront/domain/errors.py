# storefront/domain/errors.py


class AppError(Exception):
    """
    Expected, user facing error. The message goes back to the caller as is.
    Anything that is not an AppError is treated as an unexpected failure.
    """

    status_code = 500

    def __init__(self, message: str, is_operational: bool = True):
        super().__init__(message)
        self.message = message
        self.is_operational = is_operational


class BadRequestError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409
