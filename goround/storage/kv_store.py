"""In-memory string key/value store with a finite quota."""

import logging
from typing import Iterator, Optional

from goround.errors import QuotaExceededError

from .quota import DEFAULT_QUOTA_BYTES, utf16_size

logger = logging.getLogger(__name__)


class KeyValueStore:
    """A string-to-string store that refuses writes beyond ``quota_bytes``.

    Keys and values both count against the quota. A rejected write leaves
    the store exactly as it was.
    """

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES, items: Optional[dict[str, str]] = None):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            QuotaExceededError: The new value does not fit.
        """
        used = self.used_bytes()
        new_size = utf16_size(key) + utf16_size(value)
        if used - self.item_size(key) + new_size > self.quota_bytes:
            logger.error(f"Storage quota exceeded writing '{key}' ({new_size} bytes)")
            raise QuotaExceededError(new_size, used, self.quota_bytes, what=key)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def item_size(self, key: str) -> int:
        """Bytes currently occupied by ``key`` and its value (0 when absent)."""
        value = self._items.get(key)
        if value is None:
            return 0
        return utf16_size(key) + utf16_size(value)

    def used_bytes(self) -> int:
        return sum(self.item_size(key) for key in self._items)

    def keys(self) -> list[str]:
        return list(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
