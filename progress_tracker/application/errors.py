class ApplicationError(Exception):
    """Base for failures the HTTP layer turns into 4xx responses."""


class InvalidCredentials(ApplicationError):
    pass


class UsernameTaken(ApplicationError, ValueError):
    pass


class NotFound(ApplicationError):
    pass


class NotEnrolled(ApplicationError):
    pass


class InvalidInput(ApplicationError, ValueError):
    pass
