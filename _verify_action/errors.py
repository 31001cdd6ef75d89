"""
Error types for the VisiHub Verify action.

Every fatal condition in the pipeline is raised as a VerifyActionError
subclass. The orchestrator catches these, emits a single ::error::
annotation with the message, and exits with status 1 before any output
is written. A failed integrity CHECK is not an error: it is a verdict,
and it is reported through stage 6 instead.
"""


class VerifyActionError(Exception):
    """Base class for fatal pipeline errors. str(error) is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(VerifyActionError):
    """Missing or malformed action input. Raised before any network call."""


class AuthenticationError(VerifyActionError):
    """The API key was rejected by the identity endpoint."""


class ApiError(VerifyActionError):
    """A VisiHub API call failed (transport error, non-2xx, or bad JSON)."""

    def __init__(self, operation: str, detail: str = ""):
        message = f"Failed to {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation
        self.detail = detail


class UploadError(VerifyActionError):
    """The PUT to the upload URL did not return a 2xx status."""

    def __init__(self, status_code=None, detail: str = ""):
        if status_code is not None:
            message = f"Upload failed with HTTP {status_code}"
        else:
            message = f"Upload failed: {detail}"
        super().__init__(message)
        self.status_code = status_code


class ProcessingFailedError(VerifyActionError):
    """The server reported status 'failed' for the revision's run."""

    def __init__(self, revision_id):
        super().__init__("Import failed")
        self.revision_id = revision_id


class PollTimeoutError(VerifyActionError):
    """No terminal run status was seen before the wait ceiling."""

    def __init__(self, max_wait_seconds: float):
        super().__init__(
            f"Timed out waiting for import ({int(max_wait_seconds)}s)"
        )
        self.max_wait_seconds = max_wait_seconds
