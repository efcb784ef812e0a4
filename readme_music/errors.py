from __future__ import annotations


class MusicSyncError(Exception):
    pass


class ConfigurationError(MusicSyncError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__("Missing or invalid configuration: " + ", ".join(missing))


class FetchError(MusicSyncError):
    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        detail = f"{operation} failed"
        if status_code is not None:
            detail += f" ({status_code})"
        super().__init__(f"{detail}: {message}")


class DocumentWriteError(MusicSyncError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        detail = "GitHub README update failed"
        if status_code is not None:
            detail += f" ({status_code})"
        super().__init__(f"{detail}: {message}")


class ConcurrentModificationError(DocumentWriteError):
    """The document changed remotely since it was read; the write was rejected."""


class PatchTargetMissing(MusicSyncError):
    pass


class CacheReadError(MusicSyncError):
    pass
