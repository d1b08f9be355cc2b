"""Failures raised while resolving a bearer token to an identity."""


class AuthenticationError(Exception):
    pass


class InvalidTokenError(AuthenticationError):
    """The token could not be decoded, is expired, or carries no subject."""


class UserNotFoundError(AuthenticationError):
    def __init__(self, username: str):
        super().__init__(f"User not found with username: {username}")
        self.username = username
