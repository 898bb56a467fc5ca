"""
Error taxonomy for the auth/session core.

Every error carries the HTTP status and the machine-readable code that
api.errors renders into the uniform error envelope.
"""


class AuthError(Exception):
    status = 400
    code = "BAD_REQUEST"
    message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateAccount(AuthError):
    status = 409
    code = "USER_EXISTS"
    message = "User already exists"


class InvalidCredentials(AuthError):
    # unknown email, provider-only account and wrong password all look the same
    status = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class InvalidToken(AuthError):
    status = 401
    code = "INVALID_TOKEN"
    message = "Invalid or expired token"


class InvalidRefreshToken(AuthError):
    status = 403
    code = "INVALID_REFRESH_TOKEN"
    message = "Invalid refresh token"


class RefreshTokenNotFound(AuthError):
    status = 403
    code = "REFRESH_TOKEN_NOT_FOUND"
    message = "Invalid refresh token"


class OAuthError(AuthError):
    status = 502
    code = "OAUTH_FAILED"
    message = "OAuth authentication failed"


class StorageFailure(AuthError):
    status = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"
