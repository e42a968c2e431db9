"""Error taxonomy for the vargos runtime.

Providers raise these; services pass them through unchanged so the
calling layer (CLI, MCP server, agent tool) decides how to present them.
"""

from typing import Optional


class VargosError(Exception):
    """Base class for all runtime errors."""


class ConfigurationError(VargosError, ValueError):
    """Missing credentials, directories or other required settings."""


class NotFoundError(VargosError, LookupError):
    """A requested resource does not exist."""


class FunctionNotFoundError(NotFoundError):
    """Unknown function id."""

    def __init__(self, function_id: str):
        self.function_id = function_id
        super().__init__(f'Function "{function_id}" not found')


class ServiceNotRegisteredError(NotFoundError):
    """Container token was never registered."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Service not registered: {token}")


class FunctionExistsError(VargosError):
    """A function with the derived id already exists."""

    def __init__(self, function_id: str):
        self.function_id = function_id
        super().__init__(f'Function "{function_id}" already exists')


class MetadataError(VargosError):
    """A function's metadata file is missing or malformed."""

    def __init__(self, function_id: str, reason: str):
        self.function_id = function_id
        self.reason = reason
        super().__init__(f"Failed to read metadata for function {function_id}: {reason}")


class RemoteServiceError(VargosError, RuntimeError):
    """An LLM or vector backend call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ExecutionError(VargosError):
    """A function subprocess failed.

    Attributes:
        error: Short error code reported by the function (e.g. "BadInput")
        message: Human readable message, never empty
        exit_code: Subprocess exit code, if the process ran
    """

    def __init__(self, error: str, message: str, exit_code: Optional[int] = None):
        self.error = error
        self.message = message or error
        self.exit_code = exit_code
        super().__init__(f"{self.error}: {self.message}")

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class ParseError(ExecutionError):
    """A successful subprocess produced no parseable JSON value."""

    def __init__(self, message: str, exit_code: Optional[int] = 0):
        super().__init__("ParseError", message, exit_code)


class ShellBusyError(VargosError):
    """A shell command was issued while another is still running."""

    def __init__(self, command: Optional[str]):
        self.command = command
        super().__init__(
            f"Shell is busy. Last running command: '{command or 'unknown'}'. "
            f"Please wait for it to finish or interrupt."
        )


class ShellInterruptedError(VargosError):
    """The running shell command was aborted by interrupt()."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Command interrupted: '{command}'")


class ShellExitedError(VargosError):
    """The shell process ended before the command completed."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Shell exited while running: '{command}'")
