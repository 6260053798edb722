"""Storage provider contract shared by both backends.

Backends implement the collection primitives (read/write the whole list of
projects, layouts or fonts; font settings; recent list; exports). Entity
lookups, duplication, renaming, metadata listings, font uploads and the
external-font list are built on those primitives here so both backends
behave identically.
"""

import base64
import logging
import time
from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import Optional

from goround.errors import NotFoundError, UnsupportedFormatError
from goround.schemas.carousel_schema import Project, ProjectMetadata, Slide, now_iso
from goround.schemas.config import StorageConfig
from goround.schemas.export_schema import (
    CarouselExport,
    ExportOptions,
    ExportResult,
    FigmaImportResult,
    RecentProject,
    StoragePaths,
)
from goround.schemas.font_schema import CustomFont, FontFormat, FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.utils.file_utils import format_bytes

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def make_duplicate(project: Project) -> Project:
    """Independent copy of ``project`` with a new id, fresh timestamps and a "(Copy)" name."""
    timestamp = now_iso()
    return project.model_copy(
        deep=True,
        update={
            "id": f"{project.id}-copy-{now_millis()}",
            "name": f"{project.name} (Copy)",
            "created_at": timestamp,
            "modified_at": timestamp,
        },
    )


def parse_font_file(filename: str, data: bytes) -> CustomFont:
    """Build a CustomFont from an uploaded file.

    ``MyFont-Bold.otf`` becomes name ``MyFont-Bold``, family ``MyFont Bold``,
    format ``otf``. The file content is stored as a base64 data URL.

    Raises:
        UnsupportedFormatError: The extension is not ttf, otf, woff or woff2.
    """
    path = PurePath(filename)
    extension = path.suffix[1:].lower() if path.suffix else None
    try:
        font_format = FontFormat(extension)
    except ValueError:
        raise UnsupportedFormatError(filename, extension)

    name = path.stem
    family = name.replace("-", " ").replace("_", " ")
    encoded = base64.b64encode(data).decode("ascii")
    return CustomFont(
        id=f"font-{now_millis()}",
        name=name,
        family=family,
        format=font_format,
        base64_data=f"data:{font_format.mime_type};base64,{encoded}",
    )


def push_recent(entries: list[RecentProject], path: str, name: str, limit: int) -> list[RecentProject]:
    """Put ``path`` at the front, dropping older entries for it and anything past ``limit``."""
    kept = [entry for entry in entries if entry.path != path]
    kept.insert(0, RecentProject(path=path, name=name, timestamp=now_millis()))
    return kept[:limit]


class StorageProvider(ABC):
    """Asynchronous persistence for projects, layouts, fonts and exports."""

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()

    # ==================== PLATFORM ====================

    @abstractmethod
    async def is_desktop(self) -> bool: ...

    @abstractmethod
    async def get_paths(self) -> StoragePaths: ...

    # ==================== PROJECTS ====================

    @abstractmethod
    async def get_all_projects(self) -> list[Project]: ...

    @abstractmethod
    async def save_project(self, project: Project) -> None:
        """Insert or replace ``project`` (matched by id), stamping ``modified_at``."""

    @abstractmethod
    async def delete_project(self, project_id: str) -> None: ...

    async def get_project(self, project_id: str) -> Optional[Project]:
        projects = await self.get_all_projects()
        return next((p for p in projects if p.id == project_id), None)

    async def require_project(self, project_id: str) -> Project:
        project = await self.get_project(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def duplicate_project(self, project_id: str) -> Project:
        source = await self.require_project(project_id)
        duplicate = make_duplicate(source)
        await self.save_project(duplicate)
        logger.info(f"Duplicated project '{source.name}' as {duplicate.id}")
        return duplicate

    async def get_project_metadata(self) -> list[ProjectMetadata]:
        return [project.metadata() for project in await self.get_all_projects()]

    async def create_new_project(self, name: str) -> Project:
        project = Project(id=f"project-{now_millis()}", name=name)
        await self.save_project(project)
        return project

    async def rename_project(self, project_id: str, new_name: str) -> None:
        project = await self.require_project(project_id)
        project.name = new_name
        await self.save_project(project)

    # ==================== CUSTOM LAYOUTS ====================

    @abstractmethod
    async def get_all_custom_layouts(self) -> list[CustomLayout]: ...

    @abstractmethod
    async def save_custom_layout(self, layout: CustomLayout) -> None: ...

    @abstractmethod
    async def delete_custom_layout(self, layout_id: str) -> None: ...

    async def get_custom_layout(self, layout_id: str) -> Optional[CustomLayout]:
        layouts = await self.get_all_custom_layouts()
        return next((l for l in layouts if l.id == layout_id), None)

    # ==================== FONTS ====================

    @abstractmethod
    async def get_all_custom_fonts(self) -> list[CustomFont]: ...

    @abstractmethod
    async def save_custom_font(self, font: CustomFont) -> None: ...

    @abstractmethod
    async def delete_custom_font(self, font_id: str) -> None: ...

    @abstractmethod
    async def get_font_settings(self) -> FontSettings: ...

    @abstractmethod
    async def save_font_settings(self, settings: FontSettings) -> None: ...

    async def upload_font(self, filename: str, data: bytes) -> CustomFont:
        """Validate, convert and persist an uploaded font file."""
        if len(data) > self.config.large_font_warning_bytes:
            logger.warning(
                f"Large font file detected: {filename} is {format_bytes(len(data))}. "
                f"{await self.describe_usage()}"
            )
        font = parse_font_file(filename, data)
        await self.save_custom_font(font)
        logger.info(f"Uploaded font '{font.family}' ({font.format.value})")
        return font

    async def describe_usage(self) -> str:
        """Human-readable storage usage, for warnings."""
        return ""

    async def _font_settings_for_update(self) -> FontSettings:
        """Settings to modify and save back; backends raise here instead of
        falling back to defaults when the stored settings cannot be read."""
        return await self.get_font_settings()

    async def add_google_font(self, family: str) -> None:
        settings = await self._font_settings_for_update()
        if family not in settings.google_fonts:
            settings.google_fonts.append(family)
            await self.save_font_settings(settings)

    async def remove_google_font(self, family: str) -> None:
        settings = await self._font_settings_for_update()
        settings.google_fonts = [f for f in settings.google_fonts if f != family]
        await self.save_font_settings(settings)

    # ==================== EXPORT ====================

    @abstractmethod
    async def export_slide(
        self,
        slide: Slide,
        content: str,
        options: ExportOptions,
        target_path: Optional[str] = None,
    ) -> ExportResult: ...

    @abstractmethod
    async def export_project_folder(
        self,
        project: Project,
        carousels: list[CarouselExport],
        export_root: Optional[str] = None,
        open_after_export: bool = False,
    ) -> ExportResult: ...

    # ==================== IMPORT ====================

    async def import_figma_svg(self) -> FigmaImportResult:
        return FigmaImportResult(success=False, error="Figma import is not available on this backend")

    # ==================== RECENT PROJECTS ====================

    @abstractmethod
    async def get_recent_projects(self) -> list[RecentProject]: ...

    @abstractmethod
    async def add_recent_project(self, project_path: str, project_name: str) -> None: ...

    @abstractmethod
    async def clear_recent_projects(self) -> None: ...
