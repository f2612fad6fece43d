from typing import Optional


class DompetError(Exception):
    """Base error for every failure raised by dompet."""

    title = "Error"

    def __init__(self, message: str = "", title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if title:
            self.title = title


class ValidationError(DompetError):
    title = "Validation Error"


class NotFoundError(DompetError):
    title = "Not Found"


class RemoteWriteError(DompetError):
    title = "Remote Write Error"


class SchemaDriftError(RemoteWriteError):
    title = "Schema Error"


class CategoryInUseError(DompetError):
    title = "Category In Use"


class ProtectedCategoryError(DompetError):
    title = "Protected Category"


class ConcurrentUpdateError(RemoteWriteError):
    title = "Concurrent Update"


class MutationInProgressError(DompetError):
    title = "Please Wait"


SCHEMA_DRIFT_MARKERS = (
    "column",
    "schema",
    "destination_wallet_id",
    "failed validation",
    "unknown field",
)


def is_schema_drift_error(exc: BaseException) -> bool:
    """True when a remote error message says a field/collection is missing."""
    message = str(exc).lower()
    return any(marker in message for marker in SCHEMA_DRIFT_MARKERS)
