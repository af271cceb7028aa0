"""Error types shared by the stores, services and HTTP layer."""


class MarkboardError(Exception):
    """Base class for application errors."""

    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message


class ConstraintViolation(MarkboardError):
    """A row with the same primary key already exists."""


class StoreUnavailable(MarkboardError):
    """The database could not be reached or refused the operation."""


class PushNotConfigured(MarkboardError):
    """VAPID keys are missing, so Web Push is disabled."""

    status_code = 503

    def __init__(self, message: str = "WebPush disabled"):
        super().__init__(message)
