"""Export pipeline: render slides through the codec and hand them to storage.

Documents are named ``<carousel>-slide-<NNN>.svg`` and grouped per carousel,
so a project exports to::

    <root>/<project>/<carousel>/<carousel>-slide-001.svg

either through the storage provider (folder picker or download archive) or
written directly with write_folder().
"""

import logging
from pathlib import Path
from typing import Optional

from goround.schemas.carousel_schema import Carousel, Project, Slide
from goround.schemas.config import AppConfig
from goround.schemas.export_schema import (
    CarouselExport,
    ExportOptions,
    ExportPreset,
    ExportResult,
    SlideFile,
)
from goround.schemas.font_schema import CustomFont, FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.storage.base import StorageProvider
from goround.storage.downloads import build_zip_archive
from goround.svg_engine.codec import encode, generate_slide_filename
from goround.utils.file_utils import ensure_directory, sanitize_name

logger = logging.getLogger(__name__)


class RenderContext:
    """Font settings, custom fonts and custom layouts used for one export run."""

    def __init__(
        self,
        font_settings: FontSettings,
        custom_fonts: list[CustomFont],
        custom_layouts: list[CustomLayout],
    ):
        self.font_settings = font_settings
        self.custom_fonts = custom_fonts
        self.custom_layouts = custom_layouts


class ExportPipeline:
    """Renders slides and projects for export.

    Args:
        storage: Provider supplying font settings, custom fonts and layouts,
            and receiving the finished documents.
        config: Application config (presets, metadata flag, format).
    """

    def __init__(self, storage: StorageProvider, config: Optional[AppConfig] = None):
        self.storage = storage
        self.config = config or AppConfig()

    async def load_context(self) -> RenderContext:
        return RenderContext(
            font_settings=await self.storage.get_font_settings(),
            custom_fonts=await self.storage.get_all_custom_fonts(),
            custom_layouts=await self.storage.get_all_custom_layouts(),
        )

    def _preset(self, preset: ExportPreset | str | None) -> ExportPreset:
        if isinstance(preset, ExportPreset):
            return preset
        return self.config.get_preset(preset)

    async def render_slide(
        self,
        slide: Slide,
        preset: ExportPreset | str | None = None,
        context: Optional[RenderContext] = None,
    ) -> str:
        """Encode one slide as an SVG document."""
        context = context or await self.load_context()
        return encode(
            slide,
            self._preset(preset),
            context.font_settings,
            context.custom_fonts,
            context.custom_layouts,
            include_metadata=self.config.export.include_metadata,
        )

    async def build_carousel_exports(
        self,
        project: Project,
        preset: ExportPreset | str | None = None,
    ) -> list[CarouselExport]:
        """Render every slide of ``project``, one CarouselExport per carousel."""
        preset = self._preset(preset)
        context = await self.load_context()
        exports = []
        for carousel in project.carousels:
            exports.append(await self._export_carousel(carousel, preset, context))
        return exports

    async def _export_carousel(self, carousel: Carousel, preset: ExportPreset, context: RenderContext) -> CarouselExport:
        slides = []
        for slide in carousel.slides:
            content = await self.render_slide(slide, preset, context)
            name = generate_slide_filename(slide, carousel.name, self.config.export.format)
            slides.append(SlideFile(name=name, content=content))
        return CarouselExport(name=sanitize_name(carousel.name), slides=slides)

    async def export_slide(
        self,
        slide: Slide,
        preset: ExportPreset | str | None = None,
        target_path: Optional[str] = None,
    ) -> ExportResult:
        """Render one slide and hand it to the storage provider."""
        preset = self._preset(preset)
        content = await self.render_slide(slide, preset)
        options = ExportOptions(
            format=self.config.export.format,
            preset=preset,
            include_metadata=self.config.export.include_metadata,
        )
        return await self.storage.export_slide(slide, content, options, target_path)

    async def export_project(
        self,
        project: Project,
        preset: ExportPreset | str | None = None,
        export_root: Optional[str] = None,
        open_after_export: bool = False,
    ) -> ExportResult:
        """Render all slides and hand the folder tree to the storage provider."""
        exports = await self.build_carousel_exports(project, preset)
        result = await self.storage.export_project_folder(project, exports, export_root, open_after_export)
        if result.canceled:
            logger.info(f"Export of '{project.name}' canceled")
        elif not result.success:
            logger.error(f"Export of '{project.name}' failed: {result.error}")
        return result

    def write_folder(self, project: Project, exports: list[CarouselExport], root: str | Path) -> list[Path]:
        """Write rendered documents straight to ``root``. Returns the written paths."""
        project_dir = Path(root) / sanitize_name(project.name)
        written = []
        for carousel in exports:
            carousel_dir = ensure_directory(project_dir / carousel.name)
            for slide in carousel.slides:
                path = carousel_dir / slide.name
                path.write_text(slide.content, encoding="utf-8")
                written.append(path)
        logger.info(f"Wrote {len(written)} documents to {project_dir}")
        return written

    def build_archive(self, project: Project, exports: list[CarouselExport]) -> bytes:
        """ZIP archive of the export tree, for hosts without filesystem access."""
        return build_zip_archive(sanitize_name(project.name), exports)
