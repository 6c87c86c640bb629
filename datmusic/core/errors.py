"""
Error taxonomy
Every failure the engine surfaces carries the HTTP status the web layer maps it to.
"""


class DatmusicError(Exception):
    """Base error; anything not more specific is a generic server failure."""

    status_code = 500
    public_message = "Something went wrong."

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ConfigurationError(DatmusicError):
    public_message = "Service is misconfigured."


class FormNotFound(DatmusicError):
    """Expected form markup is missing; the target site changed."""

    public_message = "Upstream form not found."


class NotFound(DatmusicError):
    status_code = 404
    public_message = "Not found."


class DownloadFailed(NotFound):
    public_message = "Media download failed."


class InvalidMedia(NotFound):
    """Upstream served an error page where audio was expected."""

    public_message = "Media is not available."


class AuthenticationError(DatmusicError):
    status_code = 403
    public_message = "Authentication failed."


class AuthenticationExhausted(AuthenticationError):
    public_message = "Authentication retries exhausted."


class UnsupportedChallenge(AuthenticationError):
    public_message = "Unsupported security check."
