# family100/errors.py


class QuizError(Exception):
    """Base class for errors raised while handling client input."""


class AuthFailure(QuizError):
    """The username/password pair does not match any account."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
        self.message = message


class AuthorizationDenied(QuizError):
    """Authenticated, but the connection lacks the role or seat for the action."""


class MalformedMessage(QuizError):
    """Payload could not be parsed, or its `type` is unknown."""
