"""Size estimation for the capacity-constrained key/value backend.

Sizes are estimated the way browser storage accounts for them: every
character of the serialized value costs one UTF-16 code unit (2 bytes, 4
for characters outside the Basic Multilingual Plane).
"""

import json
from typing import Any, Optional

from pydantic import BaseModel

from goround.utils.file_utils import format_bytes

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class StorageQuota(BaseModel):
    used: int
    total: int
    available: int


def utf16_size(text: str) -> int:
    """Bytes a string occupies as UTF-16."""
    return len(text.encode("utf-16-le"))


def serialize(data: Any) -> str:
    """Compact JSON, the same form the key/value backend persists."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True) if hasattr(item, "model_dump") else item
            for item in data
        ]
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def estimate_data_size(data: Any) -> int:
    """Estimated stored size in bytes of ``data`` once serialized.

    Strings are measured as-is; everything else is serialized to compact
    JSON first.
    """
    text = data if isinstance(data, str) else serialize(data)
    return utf16_size(text)


def get_storage_quota(store) -> StorageQuota:
    """Usage snapshot of a KeyValueStore."""
    used = store.used_bytes()
    total = store.quota_bytes
    return StorageQuota(used=used, total=total, available=max(0, total - used))


def has_enough_space(store, size: int, replacing_key: Optional[str] = None) -> bool:
    """Whether ``size`` more bytes fit into ``store``.

    With ``replacing_key`` the current value under that key is counted as
    free, matching what the store itself enforces on ``set_item``.
    """
    available = get_storage_quota(store).available
    if replacing_key is not None:
        available += store.item_size(replacing_key)
    return size <= available


__all__ = [
    "DEFAULT_QUOTA_BYTES",
    "StorageQuota",
    "estimate_data_size",
    "format_bytes",
    "get_storage_quota",
    "has_enough_space",
    "serialize",
    "utf16_size",
]
