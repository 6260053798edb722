"""Filesystem storage backend, reached through a HostBridge.

Collections are JSON arrays under the application-data root::

    <userData>/projects.json
    <userData>/layouts.json
    <userData>/fonts.json
    <userData>/font-settings.json
    <userData>/recent-projects.json

Bridge calls never raise. A missing file is an empty collection. A file that
cannot be read or parsed makes the listing methods log and return nothing,
but every read-modify-write raises IOFailureError before writing, so a
transient read failure never replaces the file with a partial collection.
A failed write raises IOFailureError carrying the bridge's description. Exports return ExportResult, with ``canceled=True`` when the
user dismisses a picker.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from goround.errors import IOFailureError
from goround.schemas.carousel_schema import Project, Slide, now_iso
from goround.schemas.config import StorageConfig
from goround.schemas.export_schema import (
    CarouselExport,
    ExportOptions,
    ExportResult,
    FigmaImportResult,
    ImportedFile,
    ImportFailure,
    RecentProject,
    StoragePaths,
)
from goround.schemas.font_schema import CustomFont, FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.utils.file_utils import sanitize_name

from .base import StorageProvider, push_recent
from .host_bridge import HostBridge

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

COLLECTION_FILES = {
    "projects": "projects.json",
    "custom_layouts": "layouts.json",
    "custom_fonts": "fonts.json",
    "font_settings": "font-settings.json",
    "recent_projects": "recent-projects.json",
}

SVG_FILTERS = [("SVG Files", ["svg"])]


def _to_json(data: Any) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        data = [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in data]
    return json.dumps(data, indent=2, ensure_ascii=False)


class FileSystemProvider(StorageProvider):
    """Storage provider for hosts with a HostBridge."""

    def __init__(
        self,
        bridge: HostBridge,
        config: Optional[StorageConfig] = None,
        default_font_settings: Optional[FontSettings] = None,
    ):
        super().__init__(config)
        self.bridge = bridge
        self.default_font_settings = default_font_settings or FontSettings()
        self._data_root: Optional[Path] = None

    # -- collection primitives --

    async def data_root(self) -> Path:
        if self._data_root is None:
            result = await self.bridge.get_path("userData")
            if result.success and result.data:
                self._data_root = Path(result.data)
            else:
                logger.warning(f"Host has no userData path ({result.error}), using {self.config.data_root}")
                self._data_root = self.config.data_root_path
        return self._data_root

    async def _collection_path(self, collection: str) -> str:
        return str(await self.data_root() / COLLECTION_FILES[collection])

    async def _read_json(self, collection: str) -> Any:
        """Parsed contents of a collection file, ``None`` when it does not exist."""
        path = await self._collection_path(collection)
        if not await self.bridge.exists(path):
            return None
        result = await self.bridge.read_file(path)
        if not result.success:
            raise IOFailureError(f"Failed to read {COLLECTION_FILES[collection]}: {result.error}")
        try:
            return json.loads(result.data)
        except json.JSONDecodeError as e:
            raise IOFailureError(f"Failed to parse {COLLECTION_FILES[collection]}: {e}") from e

    async def _read_list(self, collection: str, model: type[ModelT]) -> list[ModelT]:
        data = await self._read_json(collection)
        if not data:
            return []
        try:
            return [model.model_validate(item) for item in data]
        except (ValidationError, TypeError) as e:
            raise IOFailureError(f"Failed to load {COLLECTION_FILES[collection]}: {e}") from e

    async def _load_list(self, collection: str, model: type[ModelT]) -> list[ModelT]:
        try:
            return await self._read_list(collection, model)
        except IOFailureError as e:
            logger.error(f"Error loading {collection}: {e}")
            return []

    async def _write(self, collection: str, data: Any) -> None:
        path = await self._collection_path(collection)
        result = await self.bridge.write_file(path, _to_json(data))
        if not result.success:
            raise IOFailureError(f"Failed to write {COLLECTION_FILES[collection]}: {result.error}")

    @staticmethod
    def _upsert(items: list[ModelT], item: ModelT) -> list[ModelT]:
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                return items
        items.append(item)
        return items

    # ==================== PLATFORM ====================

    async def is_desktop(self) -> bool:
        return True

    async def get_paths(self) -> StoragePaths:
        root = await self.data_root()
        documents = await self.bridge.get_path("documents")
        return StoragePaths(
            projects=str(root / "projects"),
            templates=str(root / "templates"),
            fonts=str(root / "fonts"),
            documents=documents.data if documents.success else str(root),
        )

    # ==================== PROJECTS ====================

    async def get_all_projects(self) -> list[Project]:
        return await self._load_list("projects", Project)

    async def save_project(self, project: Project) -> None:
        stamped = project.model_copy(update={"modified_at": now_iso()})
        projects = self._upsert(await self._read_list("projects", Project), stamped)
        await self._write("projects", projects)
        project.modified_at = stamped.modified_at
        logger.debug(f"Saved project {project.id} ({len(projects)} on disk)")

    async def delete_project(self, project_id: str) -> None:
        projects = [p for p in await self._read_list("projects", Project) if p.id != project_id]
        await self._write("projects", projects)

    # ==================== CUSTOM LAYOUTS ====================

    async def get_all_custom_layouts(self) -> list[CustomLayout]:
        return await self._load_list("custom_layouts", CustomLayout)

    async def save_custom_layout(self, layout: CustomLayout) -> None:
        layouts = self._upsert(await self._read_list("custom_layouts", CustomLayout), layout)
        await self._write("custom_layouts", layouts)

    async def delete_custom_layout(self, layout_id: str) -> None:
        layouts = [l for l in await self._read_list("custom_layouts", CustomLayout) if l.id != layout_id]
        await self._write("custom_layouts", layouts)

    # ==================== FONTS ====================

    async def get_all_custom_fonts(self) -> list[CustomFont]:
        return await self._load_list("custom_fonts", CustomFont)

    async def save_custom_font(self, font: CustomFont) -> None:
        fonts = self._upsert(await self._read_list("custom_fonts", CustomFont), font)
        await self._write("custom_fonts", fonts)

    async def delete_custom_font(self, font_id: str) -> None:
        fonts = [f for f in await self._read_list("custom_fonts", CustomFont) if f.id != font_id]
        await self._write("custom_fonts", fonts)

    async def get_font_settings(self) -> FontSettings:
        try:
            return await self._font_settings_for_update()
        except IOFailureError as e:
            logger.error(f"Error loading font settings: {e}")
            return self.default_font_settings.model_copy(deep=True)

    async def _font_settings_for_update(self) -> FontSettings:
        data = await self._read_json("font_settings")
        if not data:
            return self.default_font_settings.model_copy(deep=True)
        try:
            return FontSettings.model_validate(data)
        except ValidationError as e:
            raise IOFailureError(f"Failed to load {COLLECTION_FILES['font_settings']}: {e}") from e

    async def save_font_settings(self, settings: FontSettings) -> None:
        await self._write("font_settings", settings)

    # ==================== EXPORT ====================

    async def export_slide(
        self,
        slide: Slide,
        content: str,
        options: ExportOptions,
        target_path: Optional[str] = None,
    ) -> ExportResult:
        if target_path is None:
            target_path = await self.bridge.save_file_picker(
                title="Save SVG",
                default_name=f"slide-{slide.slide_number}-{options.preset.id}.{options.format}",
                filters=SVG_FILTERS,
            )
            if target_path is None:
                logger.info("Slide export canceled")
                return ExportResult(success=False, canceled=True)

        result = await self.bridge.write_file(target_path, content)
        if not result.success:
            logger.error(f"Slide export failed: {result.error}")
            return ExportResult(success=False, error=result.error)
        logger.info(f"Exported slide {slide.slide_number} to {target_path}")
        return ExportResult(success=True, file_path=target_path)

    async def export_project_folder(
        self,
        project: Project,
        carousels: list[CarouselExport],
        export_root: Optional[str] = None,
        open_after_export: bool = False,
    ) -> ExportResult:
        if export_root is None:
            export_root = await self.bridge.open_folder_picker(title="Select Export Location")
            if export_root is None:
                logger.info("Project export canceled")
                return ExportResult(success=False, canceled=True)

        export_path = Path(export_root) / sanitize_name(project.name)
        for carousel in carousels:
            carousel_path = export_path / carousel.name
            mkdir = await self.bridge.mkdir(str(carousel_path))
            if not mkdir.success:
                return ExportResult(success=False, error=mkdir.error)
            for slide in carousel.slides:
                written = await self.bridge.write_file(str(carousel_path / slide.name), slide.content)
                if not written.success:
                    logger.error(f"Project export failed at {slide.name}: {written.error}")
                    return ExportResult(success=False, error=written.error)

        count = sum(len(c.slides) for c in carousels)
        logger.info(f"Exported {count} slides of '{project.name}' to {export_path}")

        if open_after_export:
            opened = await self.bridge.open_path(str(export_path))
            if not opened.success:
                logger.warning(f"Could not open {export_path}: {opened.error}")
        return ExportResult(success=True, file_path=str(export_path))

    # ==================== IMPORT ====================

    async def pick_documents(self) -> tuple[Optional[list[ImportedFile]], list[ImportFailure]]:
        """Let the user pick SVG files and read them. ``None`` when canceled."""
        paths = await self.bridge.open_file_picker(title="Import Figma SVG", filters=SVG_FILTERS, multiple=True)
        if not paths:
            return None, []
        files: list[ImportedFile] = []
        failures: list[ImportFailure] = []
        for path in paths:
            name = Path(path).stem
            result = await self.bridge.read_file(path)
            if result.success:
                files.append(ImportedFile(name=name, path=path, content=result.data))
            else:
                logger.warning(f"Could not read {path}: {result.error}")
                failures.append(ImportFailure(name=name, error=result.error or "read failed"))
        return files, failures

    async def import_figma_svg(self) -> FigmaImportResult:
        from goround.pipelines.importer import ImportPipeline

        files, failures = await self.pick_documents()
        if files is None:
            logger.info("Figma import canceled")
            return FigmaImportResult(success=False, canceled=True)
        result = ImportPipeline(self).import_documents(files)
        result.failures = failures + result.failures
        return result

    # ==================== RECENT PROJECTS ====================

    async def get_recent_projects(self) -> list[RecentProject]:
        return await self._load_list("recent_projects", RecentProject)

    async def add_recent_project(self, project_path: str, project_name: str) -> None:
        current = await self._read_list("recent_projects", RecentProject)
        recent = push_recent(current, project_path, project_name, self.config.recent_limit)
        await self._write("recent_projects", recent)

    async def clear_recent_projects(self) -> None:
        await self._write("recent_projects", [])
