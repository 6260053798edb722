"""Import pipeline: external SVG documents in, layouts or projects out.

Two paths:

- import_documents() turns each document into a CustomLayout candidate
  (see ``svg_engine.figma_import``). A document that cannot be parsed is
  reported in ``failures`` and the rest of the batch continues.
- reconstruct_project() decodes documents previously exported by goround
  back into slides, grouped by carousel and ordered by slide number.
"""

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Optional

from goround.errors import NotReconstructibleError
from goround.schemas.carousel_schema import Carousel, Project
from goround.schemas.export_schema import DecodedSlide, FigmaImportResult, ImportedFile, ImportFailure
from goround.schemas.layout_schema import CustomLayout
from goround.svg_engine.codec import decode
from goround.svg_engine.figma_import import parse_external_svg

if TYPE_CHECKING:
    from goround.storage.base import StorageProvider

logger = logging.getLogger(__name__)

UNGROUPED_CAROUSEL = "Imported"


def carousel_name_from_file(name: str) -> str:
    """``Launch-slide-001`` -> ``Launch``."""
    stem = name.rsplit(".", 1)[0] if name.endswith(".svg") else name
    if "-slide-" in stem:
        return stem.rsplit("-slide-", 1)[0]
    return UNGROUPED_CAROUSEL


class ImportPipeline:
    def __init__(self, storage: Optional["StorageProvider"] = None):
        self.storage = storage

    def import_documents(self, files: list[ImportedFile]) -> FigmaImportResult:
        """Build a CustomLayout candidate per document."""
        templates: list[CustomLayout] = []
        failures: list[ImportFailure] = []
        for file in files:
            try:
                templates.append(parse_external_svg(file.content, file.name))
            except NotReconstructibleError as e:
                logger.warning(f"Skipping {file.name}: {e.message}")
                failures.append(ImportFailure(name=file.name, error=e.message))

        logger.info(f"Imported {len(templates)} of {len(files)} documents as layouts")
        return FigmaImportResult(
            success=bool(templates),
            templates=templates,
            failures=failures,
            error=None if templates else "No document could be imported",
        )

    async def save_templates(self, templates: list[CustomLayout]) -> int:
        """Persist imported layouts through the storage provider."""
        if self.storage is None:
            raise ValueError("ImportPipeline has no storage provider to save to")
        for template in templates:
            await self.storage.save_custom_layout(template)
        logger.info(f"Saved {len(templates)} imported layouts")
        return len(templates)

    def reconstruct_project(self, name: str, files: list[ImportedFile]) -> tuple[Project, list[ImportFailure]]:
        """Rebuild a project from exported documents.

        Documents are grouped by the carousel id in their metadata (or by the
        carousel part of the file name when there is none) and ordered by
        slide number, then file name. Slides are renumbered 1..n.
        """
        groups: dict[str, list[tuple[ImportedFile, DecodedSlide]]] = defaultdict(list)
        names: dict[str, str] = {}
        failures: list[ImportFailure] = []

        for file in files:
            try:
                decoded = decode(file.content)
            except NotReconstructibleError as e:
                logger.warning(f"Cannot reconstruct {file.name}: {e.message}")
                failures.append(ImportFailure(name=file.name, error=e.message))
                continue
            carousel_name = carousel_name_from_file(file.name)
            key = decoded.carousel_id or f"name:{carousel_name}"
            groups[key].append((file, decoded))
            names.setdefault(key, carousel_name)

        project = Project(name=name)
        for key, members in groups.items():
            members.sort(key=lambda m: (m[1].slide_number or 0, m[0].name))
            if key.startswith("name:"):
                carousel = Carousel(name=names[key])
            else:
                carousel = Carousel(id=key, name=names[key])
            for number, (_, decoded) in enumerate(members, start=1):
                carousel.slides.append(decoded.to_slide(carousel_id=carousel.id, slide_number=number))
            project.carousels.append(carousel)

        logger.info(
            f"Reconstructed '{name}': {len(project.carousels)} carousels, "
            f"{project.slide_count} slides, {len(failures)} failures"
        )
        return project, failures
