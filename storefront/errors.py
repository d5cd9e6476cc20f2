class StorefrontError(Exception):
    """
    Base class for failures of a single storefront action.

    `detail` holds the message the backend supplied, when it supplied one.
    Page controllers show it to the shopper in preference to their own
    generic fallback.
    """

    def __init__(self, message, detail=None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def user_message(self, fallback):
        return self.detail or fallback


class TransportError(StorefrontError):
    """The request never produced a response (connection failure, timeout)."""


class BackendError(StorefrontError):
    """The backend answered with a 4xx/5xx status."""

    def __init__(self, status_code, detail=None):
        super().__init__(f"Backend returned HTTP {status_code}", detail)
        self.status_code = status_code


class AuthenticationError(BackendError):
    """The admin key was rejected."""


class IllegalTransition(Exception):
    """An action the checkout state machine does not allow from its current state."""


class InvalidResponseError(StorefrontError):
    """The backend answered 2xx with a body that is not a valid payload for the call."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
