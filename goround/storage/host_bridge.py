"""Host bridge: the capability interface the filesystem backend uses for real I/O.

Every call is named and returns an OperationResult instead of raising, so
any transport (direct syscalls, local RPC, a network service) that honors
the same request/response contract can stand in. Pickers return ``None``
when the user dismisses them.
"""

import asyncio
import base64
import inspect
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional

from goround.schemas.export_schema import OperationResult

logger = logging.getLogger(__name__)

PATH_NAMES = ("userData", "documents", "downloads", "home")

FileFilter = tuple[str, list[str]]


class HostBridge(ABC):
    """Asynchronous request/response channel to the host."""

    # Files and directories

    @abstractmethod
    async def read_file(self, path: str) -> OperationResult:
        """Read a UTF-8 text file; ``data`` is the content."""

    @abstractmethod
    async def read_binary_file(self, path: str) -> OperationResult:
        """Read a file; ``data`` is the base64-encoded content."""

    @abstractmethod
    async def write_file(self, path: str, content: str) -> OperationResult:
        """Write UTF-8 text, creating missing parent directories."""

    @abstractmethod
    async def write_binary_file(self, path: str, base64_data: str) -> OperationResult:
        """Write base64-decoded bytes, creating missing parent directories."""

    @abstractmethod
    async def delete_file(self, path: str) -> OperationResult: ...

    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @abstractmethod
    async def read_dir(self, path: str) -> OperationResult:
        """List a directory; ``data`` is a list of ``{name, isDirectory, isFile}``."""

    @abstractmethod
    async def mkdir(self, path: str) -> OperationResult: ...

    @abstractmethod
    async def rmdir(self, path: str) -> OperationResult:
        """Remove a directory recursively. Missing directories are a success."""

    # Paths and shell

    @abstractmethod
    async def get_path(self, name: str) -> OperationResult:
        """Resolve a well-known location: userData, documents, downloads or home."""

    @abstractmethod
    async def open_path(self, path: str) -> OperationResult: ...

    # Pickers

    @abstractmethod
    async def open_file_picker(
        self,
        title: str = "Open File",
        filters: Optional[list[FileFilter]] = None,
        multiple: bool = False,
    ) -> Optional[list[str]]: ...

    @abstractmethod
    async def save_file_picker(
        self,
        title: str = "Save File",
        default_name: str = "",
        filters: Optional[list[FileFilter]] = None,
    ) -> Optional[str]: ...

    @abstractmethod
    async def open_folder_picker(self, title: str = "Select Folder") -> Optional[str]: ...


async def _call_picker(picker: Optional[Callable], *args) -> Any:
    if picker is None:
        return None
    result = picker(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class LocalHostBridge(HostBridge):
    """HostBridge backed by the local filesystem.

    Blocking calls run in worker threads. Pickers and the path opener are
    injectable callables (sync or async); without one, a picker behaves as
    if the user canceled it.

    Args:
        user_data: Directory returned for ``get_path("userData")``.
        documents: Directory returned for ``get_path("documents")``.
        file_picker: ``(title, filters, multiple) -> list[str] | None``.
        save_picker: ``(title, default_name, filters) -> str | None``.
        folder_picker: ``(title) -> str | None``.
        opener: ``(path) -> None``, used by ``open_path``.
    """

    def __init__(
        self,
        user_data: str | Path = "~/.goround",
        documents: Optional[str | Path] = None,
        file_picker: Optional[Callable] = None,
        save_picker: Optional[Callable] = None,
        folder_picker: Optional[Callable] = None,
        opener: Optional[Callable[[str], Any]] = None,
    ):
        home = Path.home()
        self.paths = {
            "userData": Path(user_data).expanduser(),
            "documents": Path(documents).expanduser() if documents else home / "Documents",
            "downloads": home / "Downloads",
            "home": home,
        }
        self.file_picker = file_picker
        self.save_picker = save_picker
        self.folder_picker = folder_picker
        self.opener = opener

    async def _run(self, func: Callable, *args) -> OperationResult:
        try:
            data = await asyncio.to_thread(func, *args)
        except (OSError, ValueError) as e:
            logger.debug(f"{func.__name__} failed: {e}")
            return OperationResult.fail(e)
        return OperationResult.ok(data)

    # -- blocking implementations --

    @staticmethod
    def _read_text(path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    @staticmethod
    def _read_base64(path: str) -> str:
        return base64.b64encode(Path(path).read_bytes()).decode("ascii")

    @staticmethod
    def _write_text(path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    @staticmethod
    def _write_base64(path: str, base64_data: str) -> None:
        data = base64.b64decode(base64_data, validate=True)
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    @staticmethod
    def _unlink(path: str) -> None:
        Path(path).unlink()

    @staticmethod
    def _list_dir(path: str) -> list[dict[str, Any]]:
        return [
            {"name": entry.name, "isDirectory": entry.is_dir(), "isFile": entry.is_file()}
            for entry in sorted(Path(path).iterdir())
        ]

    @staticmethod
    def _make_dir(path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _remove_tree(path: str) -> None:
        target = Path(path)
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()

    # -- HostBridge --

    async def read_file(self, path: str) -> OperationResult:
        return await self._run(self._read_text, path)

    async def read_binary_file(self, path: str) -> OperationResult:
        return await self._run(self._read_base64, path)

    async def write_file(self, path: str, content: str) -> OperationResult:
        return await self._run(self._write_text, path, content)

    async def write_binary_file(self, path: str, base64_data: str) -> OperationResult:
        return await self._run(self._write_base64, path, base64_data)

    async def delete_file(self, path: str) -> OperationResult:
        return await self._run(self._unlink, path)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def read_dir(self, path: str) -> OperationResult:
        return await self._run(self._list_dir, path)

    async def mkdir(self, path: str) -> OperationResult:
        return await self._run(self._make_dir, path)

    async def rmdir(self, path: str) -> OperationResult:
        return await self._run(self._remove_tree, path)

    async def get_path(self, name: str) -> OperationResult:
        if name not in self.paths:
            return OperationResult.fail(f"Unknown path name: {name}")
        return OperationResult.ok(str(self.paths[name]))

    async def open_path(self, path: str) -> OperationResult:
        if self.opener is None:
            return OperationResult.fail("Opening paths is not supported by this host")
        try:
            await _call_picker(self.opener, path)
        except OSError as e:
            return OperationResult.fail(e)
        return OperationResult.ok()

    async def open_file_picker(
        self,
        title: str = "Open File",
        filters: Optional[list[FileFilter]] = None,
        multiple: bool = False,
    ) -> Optional[list[str]]:
        paths = await _call_picker(self.file_picker, title, filters or [], multiple)
        return list(paths) if paths else None

    async def save_file_picker(
        self,
        title: str = "Save File",
        default_name: str = "",
        filters: Optional[list[FileFilter]] = None,
    ) -> Optional[str]:
        return await _call_picker(self.save_picker, title, default_name, filters or []) or None

    async def open_folder_picker(self, title: str = "Select Folder") -> Optional[str]:
        return await _call_picker(self.folder_picker, title) or None
