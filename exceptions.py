"""Custom exception classes for the Crucible result-screen extractor.

The extraction core never raises: unreadable text and unmatched portraits
resolve to defaults. These exceptions belong to the collaborators around it
(image decoding and export) and are fatal in the CLI: any raise logs the
error and exits with a non-zero code.
"""

from typing import Optional


class ImageDecodeError(Exception):
    """Raised when a screenshot or reference portrait cannot be decoded.

    Args:
        source: Where the bytes came from (file path, URL, or ``"<bytes>"``).
        reason: Human-readable explanation of the failure.
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not decode image '{source}': {reason}")


class ExportError(Exception):
    """Raised when a result row cannot be delivered to its destination.

    Covers an unconfigured endpoint, network failures, and non-success
    responses from the Apps Script web app.

    Args:
        destination: The URL or sheet the row was being sent to.
        reason: Human-readable explanation of the failure.
        status: The HTTP status code, if a response was received.
    """

    def __init__(
        self,
        destination: str,
        reason: str,
        status: Optional[int] = None,
    ) -> None:
        self.destination = destination
        self.reason = reason
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(
            f"Export to '{destination}' failed{detail}: {reason}"
        )
