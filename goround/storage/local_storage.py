"""Capacity-constrained storage backend on a KeyValueStore.

Each collection (projects, layouts, fonts, recent list) lives under one key
as a JSON array and is rewritten as a whole on every change. Before a
project or font write, the size of the entire rewritten collection is
checked against the space left in the store; a write that would not fit
raises QuotaExceededError and leaves the store untouched.

One writer at a time: concurrent read-modify-write cycles on the same
collection are not coordinated.
"""

import json
import logging
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from goround.errors import QuotaExceededError
from goround.schemas.carousel_schema import Project, Slide, now_iso
from goround.schemas.config import StorageConfig
from goround.schemas.export_schema import (
    CarouselExport,
    ExportOptions,
    ExportResult,
    RecentProject,
    StoragePaths,
)
from goround.schemas.font_schema import CustomFont, FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.utils.file_utils import format_bytes, sanitize_name

from .base import StorageProvider, push_recent
from .downloads import DownloadSink, MemoryDownloadSink, build_zip_archive
from .kv_store import KeyValueStore
from .quota import estimate_data_size, get_storage_quota, has_enough_space, serialize

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

STORAGE_KEYS = {
    "projects": "carousel_projects",
    "custom_layouts": "custom_layouts",
    "custom_fonts": "custom_fonts",
    "font_settings": "font_settings",
    "recent_projects": "recent_projects",
}


class LocalStorageProvider(StorageProvider):
    """Storage provider for hosts without filesystem access."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        config: Optional[StorageConfig] = None,
        sink: Optional[DownloadSink] = None,
        default_font_settings: Optional[FontSettings] = None,
    ):
        super().__init__(config)
        self.store = store if store is not None else KeyValueStore(self.config.quota_bytes)
        self.sink = sink if sink is not None else MemoryDownloadSink()
        self.default_font_settings = default_font_settings or FontSettings()

    # -- collection primitives --

    def _load_list(self, key: str, model: type[ModelT], what: str) -> list[ModelT]:
        raw = self.store.get_item(key)
        if not raw:
            return []
        try:
            return [model.model_validate(item) for item in json.loads(raw)]
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error(f"Error loading {what}: {e}")
            return []

    def _write(self, key: str, data: Any, what: str, check_quota: bool = False) -> None:
        if check_quota:
            size = estimate_data_size(data)
            if not has_enough_space(self.store, size):
                quota = get_storage_quota(self.store)
                raise QuotaExceededError(size, quota.used, quota.total, what=what)
        self.store.set_item(key, serialize(data))

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
        return False

    async def get_paths(self) -> StoragePaths:
        return StoragePaths(
            projects="kv://projects",
            templates="kv://templates",
            fonts="kv://fonts",
            documents="kv://documents",
        )

    async def describe_usage(self) -> str:
        quota = get_storage_quota(self.store)
        return f"Current storage: {format_bytes(quota.used)} / {format_bytes(quota.total)}"

    # ==================== PROJECTS ====================

    async def get_all_projects(self) -> list[Project]:
        return self._load_list(STORAGE_KEYS["projects"], Project, "projects")

    async def save_project(self, project: Project) -> None:
        stamped = project.model_copy(update={"modified_at": now_iso()})
        projects = self._upsert(await self.get_all_projects(), stamped)
        self._write(STORAGE_KEYS["projects"], projects, "project", check_quota=True)
        project.modified_at = stamped.modified_at
        logger.debug(f"Saved project {project.id} ({len(projects)} in store)")

    async def delete_project(self, project_id: str) -> None:
        projects = [p for p in await self.get_all_projects() if p.id != project_id]
        self._write(STORAGE_KEYS["projects"], projects, "projects")

    # ==================== CUSTOM LAYOUTS ====================

    async def get_all_custom_layouts(self) -> list[CustomLayout]:
        return self._load_list(STORAGE_KEYS["custom_layouts"], CustomLayout, "custom layouts")

    async def save_custom_layout(self, layout: CustomLayout) -> None:
        layouts = self._upsert(await self.get_all_custom_layouts(), layout)
        self._write(STORAGE_KEYS["custom_layouts"], layouts, "custom layout")

    async def delete_custom_layout(self, layout_id: str) -> None:
        layouts = [l for l in await self.get_all_custom_layouts() if l.id != layout_id]
        self._write(STORAGE_KEYS["custom_layouts"], layouts, "custom layouts")

    # ==================== FONTS ====================

    async def get_all_custom_fonts(self) -> list[CustomFont]:
        return self._load_list(STORAGE_KEYS["custom_fonts"], CustomFont, "custom fonts")

    async def save_custom_font(self, font: CustomFont) -> None:
        fonts = self._upsert(await self.get_all_custom_fonts(), font)
        self._write(STORAGE_KEYS["custom_fonts"], fonts, "font", check_quota=True)

    async def delete_custom_font(self, font_id: str) -> None:
        fonts = [f for f in await self.get_all_custom_fonts() if f.id != font_id]
        self._write(STORAGE_KEYS["custom_fonts"], fonts, "fonts")

    async def get_font_settings(self) -> FontSettings:
        raw = self.store.get_item(STORAGE_KEYS["font_settings"])
        if not raw:
            return self.default_font_settings.model_copy(deep=True)
        try:
            return FontSettings.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Error loading font settings: {e}")
            return self.default_font_settings.model_copy(deep=True)

    async def save_font_settings(self, settings: FontSettings) -> None:
        self._write(STORAGE_KEYS["font_settings"], settings, "font settings")

    # ==================== EXPORT ====================

    async def export_slide(
        self,
        slide: Slide,
        content: str,
        options: ExportOptions,
        target_path: Optional[str] = None,
    ) -> ExportResult:
        filename = target_path or f"slide-{slide.slide_number}-{options.preset.id}.{options.format}"
        try:
            location = self.sink.deliver(filename, content.encode("utf-8"), "image/svg+xml")
        except OSError as e:
            logger.error(f"Slide export failed: {e}")
            return ExportResult(success=False, error=str(e))
        logger.info(f"Exported slide {slide.slide_number} as {filename}")
        return ExportResult(success=True, file_path=location)

    async def export_project_folder(
        self,
        project: Project,
        carousels: list[CarouselExport],
        export_root: Optional[str] = None,
        open_after_export: bool = False,
    ) -> ExportResult:
        root_name = sanitize_name(project.name)
        try:
            archive = build_zip_archive(root_name, carousels)
            location = self.sink.deliver(f"{root_name}.zip", archive, "application/zip")
        except OSError as e:
            logger.error(f"Project export failed: {e}")
            return ExportResult(success=False, error=str(e))
        count = sum(len(c.slides) for c in carousels)
        logger.info(f"Exported {count} slides of '{project.name}' to {root_name}.zip")
        return ExportResult(success=True, file_path=location)

    # ==================== RECENT PROJECTS ====================

    async def get_recent_projects(self) -> list[RecentProject]:
        return self._load_list(STORAGE_KEYS["recent_projects"], RecentProject, "recent projects")

    async def add_recent_project(self, project_path: str, project_name: str) -> None:
        recent = push_recent(
            await self.get_recent_projects(), project_path, project_name, self.config.recent_limit
        )
        self._write(STORAGE_KEYS["recent_projects"], recent, "recent projects")

    async def clear_recent_projects(self) -> None:
        self._write(STORAGE_KEYS["recent_projects"], [], "recent projects")
