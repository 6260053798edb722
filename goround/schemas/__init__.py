from .carousel_schema import (
    CUSTOM_LAYOUT_PREFIX, DEFAULT_LAYOUT, LayoutType, Slide, Carousel,
    Project, ProjectMetadata, new_id, now_iso,
)
from .layout_schema import CustomLayout
from .font_schema import FontFormat, CustomFont, FontSettings
from .export_schema import (
    ExportPreset, ExportOptions, ExportResult, OperationResult, SlideFile,
    CarouselExport, ImportedFile, ImportFailure, FigmaImportResult,
    RecentProject, StoragePaths, SaveStatus, DecodedSlide,
)
from .config import StorageConfig, AutoSaveConfig, ExportConfig, AppConfig

__all__ = [
    "CUSTOM_LAYOUT_PREFIX",
    "DEFAULT_LAYOUT",
    "LayoutType",
    "Slide",
    "Carousel",
    "Project",
    "ProjectMetadata",
    "new_id",
    "now_iso",
    "CustomLayout",
    "FontFormat",
    "CustomFont",
    "FontSettings",
    "ExportPreset",
    "ExportOptions",
    "ExportResult",
    "OperationResult",
    "SlideFile",
    "CarouselExport",
    "ImportedFile",
    "ImportFailure",
    "FigmaImportResult",
    "RecentProject",
    "StoragePaths",
    "SaveStatus",
    "DecodedSlide",
    "StorageConfig",
    "AutoSaveConfig",
    "ExportConfig",
    "AppConfig",
]
