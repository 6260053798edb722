"""Storage providers and the context that hands them out.

A StorageContext is created once (usually at application start), given the
configuration and, when the host offers one, a HostBridge. Its ``provider``
is built on first access: the filesystem backend when a bridge is present,
the capacity-constrained key/value backend otherwise. Consumers receive the
context or the provider explicitly; ``reset()`` tears it down for tests.
"""

import logging
from typing import Optional

from goround.schemas.config import AppConfig

from .quota import StorageQuota, estimate_data_size, format_bytes, get_storage_quota, has_enough_space
from .kv_store import KeyValueStore
from .downloads import DirectoryDownloadSink, DownloadSink, MemoryDownloadSink, build_zip_archive
from .base import StorageProvider, make_duplicate, parse_font_file, push_recent
from .host_bridge import HostBridge, LocalHostBridge
from .local_storage import LocalStorageProvider
from .file_system import FileSystemProvider

logger = logging.getLogger(__name__)


def create_storage(
    config: Optional[AppConfig] = None,
    bridge: Optional[HostBridge] = None,
    store: Optional[KeyValueStore] = None,
    sink: Optional[DownloadSink] = None,
) -> StorageProvider:
    """Build the provider suited to the host: filesystem with a bridge, key/value without."""
    config = config or AppConfig()
    if bridge is not None:
        logger.info("Using filesystem storage provider")
        return FileSystemProvider(bridge, config.storage, config.default_font_settings)
    logger.info("Using key/value storage provider")
    return LocalStorageProvider(store, config.storage, sink, config.default_font_settings)


class StorageContext:
    """Single initialization point for the process's storage provider."""

    def __init__(self, config: Optional[AppConfig] = None, bridge: Optional[HostBridge] = None):
        self.config = config or AppConfig()
        self.bridge = bridge
        self._provider: Optional[StorageProvider] = None

    def initialize(self, config: Optional[AppConfig] = None, bridge: Optional[HostBridge] = None) -> None:
        """Replace configuration and bridge; the provider is rebuilt on next access."""
        if config is not None:
            self.config = config
        self.bridge = bridge
        self._provider = None

    @property
    def provider(self) -> StorageProvider:
        if self._provider is None:
            self._provider = create_storage(self.config, self.bridge)
        return self._provider

    @property
    def is_desktop(self) -> bool:
        return self.bridge is not None

    def reset(self) -> None:
        """Drop the provider so the next access builds a fresh one."""
        self._provider = None


__all__ = [
    "StorageQuota",
    "estimate_data_size",
    "format_bytes",
    "get_storage_quota",
    "has_enough_space",
    "KeyValueStore",
    "DownloadSink",
    "MemoryDownloadSink",
    "DirectoryDownloadSink",
    "build_zip_archive",
    "StorageProvider",
    "make_duplicate",
    "parse_font_file",
    "push_recent",
    "HostBridge",
    "LocalHostBridge",
    "LocalStorageProvider",
    "FileSystemProvider",
    "create_storage",
    "StorageContext",
]
