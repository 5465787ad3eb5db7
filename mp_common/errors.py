"""Shared error taxonomy for machine-provisioner."""

from __future__ import annotations

from typing import Any, Mapping


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class MPError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(MPError):
    """Failure due to invalid configuration."""


class DriverError(MPError):
    """Failure reported by a machine driver (IP lookup, SSH coordinates)."""


class RemoteCommandError(MPError):
    """A remote command exited non-zero or could not be delivered.

    ``exit_code`` is None when the command never ran (unreachable host,
    authentication or transport failure).
    """

    def __init__(
        self,
        message: str,
        *,
        command: str,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            context={"command": command, "exit_code": exit_code},
            cause=cause,
        )
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    @property
    def transport_failure(self) -> bool:
        return self.exit_code is None


class DetectionError(MPError):
    """The OS identification probe failed."""


class OsReleaseParseError(MPError):
    """Malformed os-release content."""


class NoCompatibleProvisionerError(DetectionError):
    """No registered provisioner accepted the detected OS."""

    def __init__(self, os_id: str) -> None:
        super().__init__(
            f"No compatible provisioner found for OS id {os_id!r}",
            context={"os_id": os_id},
        )
        self.os_id = os_id


class WaitTimeoutError(MPError):
    """A polled condition did not become true within its attempt budget."""

    def __init__(self, attempts: int, *, elapsed: float | None = None) -> None:
        message = f"Maximum number of retries ({attempts}) exceeded"
        if elapsed is not None:
            message = f"{message} after {elapsed:.1f}s"
        super().__init__(message, context={"attempts": attempts, "elapsed": elapsed})
        self.attempts = attempts


class TemplateRenderError(MPError):
    """A daemon configuration template failed to render."""


class ProvisioningError(MPError):
    """A provisioning step failed for a reason other than a remote command."""


def error_to_payload(error: MPError) -> dict[str, Any]:
    """Convert an MPError to a reportable payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
