from .exporter import ExportPipeline, RenderContext
from .importer import ImportPipeline, carousel_name_from_file

__all__ = [
    "ExportPipeline",
    "RenderContext",
    "ImportPipeline",
    "carousel_name_from_file",
]
