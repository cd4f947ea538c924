class SessionError(Exception):
    """Base error for the session layer."""


class InvalidArgumentError(SessionError, ValueError):
    """A local precondition was violated (bad name, path, callback...)."""
