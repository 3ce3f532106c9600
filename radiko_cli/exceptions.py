"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class RadikoCliError(Exception):
    """Base exception for all application-specific errors."""


class HttpError(RadikoCliError):
    """Raised when the radiko API answers with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str | None):
        super().__init__(f"HTTP error code: {status_code}")
        self.status_code = status_code
        self.body = body


class ResponseError(RadikoCliError):
    """
    Raised when the API answered successfully but the content does not match
    what the client expects (empty body, missing header or field, bad JSON).
    """


class FFmpegAbnormalExitError(RadikoCliError):
    """Raised when the ffmpeg process exits with a non-zero status."""

    def __init__(self, returncode: int, stderr: str = ""):
        message = f"ffmpeg exited with code {returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DownloadError(RadikoCliError):
    """Raised when a timefree download fails inside the transcoder."""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause


class ConfigurationError(RadikoCliError):
    """Raised for issues related to configuration loading or validation."""


class FileIntegrityError(RadikoCliError):
    """Raised when a downloaded file fails a post-download integrity check."""
