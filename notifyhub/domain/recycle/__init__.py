from notifyhub.domain.recycle.exceptions import (
    InvalidCategoryError,
    NothingToRestoreError,
    PathEscapeError,
    RecyclePermissionError,
    RestoreFailedError,
)
from notifyhub.domain.recycle.models import (
    AUTO_DELETE_FOLDER,
    AutoDeleteMode,
    AutoDeleteReport,
    CATEGORY_FOLDER_MAP,
    PurgeOutcome,
    PurgeRequest,
    RecoveryMaterial,
    RecoverySource,
    RecycleResult,
    RestoreOutcome,
    RestoreRequest,
    is_safe_ref_id,
)

__all__ = [
    "AUTO_DELETE_FOLDER",
    "AutoDeleteMode",
    "AutoDeleteReport",
    "CATEGORY_FOLDER_MAP",
    "InvalidCategoryError",
    "NothingToRestoreError",
    "PathEscapeError",
    "PurgeOutcome",
    "PurgeRequest",
    "RecoveryMaterial",
    "RecoverySource",
    "RecycleResult",
    "RecyclePermissionError",
    "RestoreFailedError",
    "RestoreOutcome",
    "RestoreRequest",
    "is_safe_ref_id",
]
