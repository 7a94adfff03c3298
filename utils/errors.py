class UserNotFoundError(Exception):
    """An authenticated identity has no internal user record."""


class InvalidTokenError(Exception):
    """The bearer token could not be verified by the identity provider."""
