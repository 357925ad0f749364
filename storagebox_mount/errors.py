from __future__ import annotations

from typing import Sequence


class StorageBoxError(RuntimeError):
    """Fatal error; aborts the pipeline and triggers cleanup."""

    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(StorageBoxError):
    """Bad profile name, mount point or username shape."""


class CredentialError(StorageBoxError):
    """Password source could not be read."""


class CommandError(StorageBoxError):
    def __init__(self, message: str, *, returncode: int) -> None:
        super().__init__(message, exit_code=returncode or 1)
        self.returncode = returncode


class NegotiationError(StorageBoxError):
    def __init__(self, message: str, *, last_output: str = "") -> None:
        super().__init__(message)
        self.last_output = last_output


class MountError(StorageBoxError):
    def __init__(
        self,
        message: str,
        *,
        last_output: str = "",
        returncode: int = 1,
        diagnostics: Sequence[str] = (),
    ) -> None:
        super().__init__(message, exit_code=returncode or 1)
        self.last_output = last_output
        self.returncode = returncode
        self.diagnostics = list(diagnostics)


class Cancelled(StorageBoxError):
    exit_code = 130


class StorageBoxWarning(UserWarning):
    """Non-fatal; collected on the context and reported."""


class ReadOnlyWarning(StorageBoxWarning):
    pass


class PersistenceWarning(StorageBoxWarning):
    pass
