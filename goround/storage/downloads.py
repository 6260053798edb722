"""Download targets for backends without direct filesystem access.

A DownloadSink receives finished files (a single document, or a ZIP archive
of a whole project) the way a browser download would.
"""

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path

from goround.schemas.export_schema import CarouselExport
from goround.utils.file_utils import ensure_directory

logger = logging.getLogger(__name__)


def build_zip_archive(root_name: str, carousels: list[CarouselExport]) -> bytes:
    """ZIP archive laid out as ``<root_name>/<carousel>/<slide file>``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for carousel in carousels:
            for slide in carousel.slides:
                archive.writestr(f"{root_name}/{carousel.name}/{slide.name}", slide.content.encode("utf-8"))
    return buffer.getvalue()


class DownloadSink(ABC):
    @abstractmethod
    def deliver(self, filename: str, data: bytes, mime_type: str) -> str:
        """Hand over a finished file. Returns where it ended up."""


class MemoryDownloadSink(DownloadSink):
    """Keeps downloads in memory, keyed by filename (latest wins)."""

    def __init__(self):
        self.downloads: dict[str, bytes] = {}
        self.mime_types: dict[str, str] = {}

    def deliver(self, filename: str, data: bytes, mime_type: str) -> str:
        self.downloads[filename] = data
        self.mime_types[filename] = mime_type
        return filename


class DirectoryDownloadSink(DownloadSink):
    """Writes downloads into a directory, like a browser's download folder."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def deliver(self, filename: str, data: bytes, mime_type: str) -> str:
        target = ensure_directory(self.directory) / filename
        target.write_bytes(data)
        logger.info(f"Downloaded {filename} ({mime_type}) to {self.directory}")
        return str(target)
