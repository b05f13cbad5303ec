"""
Error taxonomy shared by the runner, the downloader and the installers.

Every error carries an optional one-line ``suggestion`` shown to the user
next to the message. Cancellation is identified by type, never by text.
"""

from typing import Optional


class VoiceflowError(Exception):
    """Base class for all user-facing failures."""

    default_suggestion: Optional[str] = None

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion if suggestion is not None else self.default_suggestion


class Cancelled(VoiceflowError):
    """The session was aborted by the user. Benign; exits 0."""

    def __init__(self, message: str = "Operation cancelled", suggestion: Optional[str] = None):
        super().__init__(message, suggestion)


class CommandTimeout(VoiceflowError):
    default_suggestion = "The operation took too long; try again"

    def __init__(self, command: str, timeout: float):
        super().__init__(f"'{command}' timed out after {timeout:g}s")
        self.command = command
        self.timeout = timeout


class NetworkError(VoiceflowError):
    default_suggestion = "Check your network connection or proxy settings and retry"

    def __init__(self, message: str, status: Optional[int] = None, suggestion: Optional[str] = None):
        super().__init__(message, suggestion)
        self.status = status


class NonZeroExit(VoiceflowError):
    def __init__(self, command: str, returncode: int, stderr: str = "", suggestion: Optional[str] = None):
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"'{command}' failed: {detail}", suggestion)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class FileSystemError(VoiceflowError):
    default_suggestion = "Check permissions and free disk space, or run with elevated privileges"


class UnsupportedPlatform(VoiceflowError):
    default_suggestion = "Check that your operating system is supported"


class BuildToolsMissing(VoiceflowError):
    def __init__(self, missing, suggestion: Optional[str] = None):
        super().__init__(f"Missing build tools: {', '.join(missing)}", suggestion)
        self.missing = list(missing)
