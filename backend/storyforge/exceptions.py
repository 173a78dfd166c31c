"""Exception types raised by services and mapped to HTTP responses in main.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request (the background cache refresh, scripts, tests).
"""


class NotFoundError(Exception):
    """A requested local or remote resource does not exist."""

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Input rejected before any mutation.

    Args:
        message: Human-readable explanation.
        field: Name of the offending input field, if there is a single one.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AdoError(Exception):
    """Base class for failures talking to Azure DevOps."""


class AdoNotConfiguredError(AdoError):
    def __init__(self, message: str = "Azure DevOps settings not configured. Please configure in Settings.") -> None:
        super().__init__(message)


class AdoApiError(AdoError):
    """ADO answered with an error status or could not be reached.

    ``status`` is the upstream HTTP status, or None when no response arrived.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)
