"""Pydantic models for export/import results and storage bookkeeping."""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .carousel_schema import COLOR_FIELDS, TEXT_FIELDS, Slide
from .layout_schema import CustomLayout


class ExportPreset(BaseModel):
    """Target pixel geometry for exported documents."""

    id: str
    name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    def scaled(self, factor: int) -> "ExportPreset":
        return ExportPreset(
            id=f"{self.id}@{factor}x",
            name=f"{self.name} @{factor}x",
            width=self.width * factor,
            height=self.height * factor,
        )


class ExportOptions(BaseModel):
    format: Literal["svg"] = "svg"
    preset: ExportPreset
    include_metadata: bool = True


class ExportResult(BaseModel):
    """Outcome of an export. ``canceled`` is not a failure."""

    success: bool
    file_path: Optional[str] = None
    canceled: bool = False
    error: Optional[str] = None


class OperationResult(BaseModel):
    """Tri-state result returned by host bridge calls instead of raising."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str | Exception) -> "OperationResult":
        return cls(success=False, error=str(error))


class SlideFile(BaseModel):
    """One rendered document ready to be written."""

    name: str
    content: str


class CarouselExport(BaseModel):
    """Rendered documents of one carousel, named for the folder layout."""

    name: str
    slides: list[SlideFile] = Field(default_factory=list)


class ImportedFile(BaseModel):
    """Raw document handed to the import pipeline."""

    name: str
    content: str
    path: Optional[str] = None


class ImportFailure(BaseModel):
    name: str
    error: str


class FigmaImportResult(BaseModel):
    """Per-batch import outcome. Individual files may fail without failing the batch."""

    success: bool
    templates: list[CustomLayout] = Field(default_factory=list)
    failures: list[ImportFailure] = Field(default_factory=list)
    canceled: bool = False
    error: Optional[str] = None

    @property
    def template(self) -> Optional[CustomLayout]:
        return self.templates[0] if self.templates else None


class RecentProject(BaseModel):
    path: str
    name: str
    timestamp: int = Field(description="Milliseconds since the epoch")


class StoragePaths(BaseModel):
    projects: str
    templates: str
    fonts: str
    documents: str


class SaveStatus(str, Enum):
    """Persistence state of the project being edited."""

    SAVED = "saved"
    SAVING = "saving"
    UNSAVED = "unsaved"
    ERROR = "error"

    @property
    def label(self) -> str:
        return {
            SaveStatus.SAVED: "Saved",
            SaveStatus.SAVING: "Saving...",
            SaveStatus.UNSAVED: "Unsaved changes",
            SaveStatus.ERROR: "Save failed",
        }[self]


class DecodedSlide(BaseModel):
    """Slide fields recovered from a document.

    ``layout_type``, ``carousel_id`` and ``slide_number`` are None when the
    document carries no goround metadata block.
    """

    layout_type: Optional[str] = None
    carousel_id: Optional[str] = None
    slide_number: Optional[int] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    body_text: Optional[str] = None
    quote: Optional[str] = None
    background_color: Optional[str] = None
    font_color: Optional[str] = None
    accent_color: Optional[str] = None
    has_metadata: bool = False

    def fields(self) -> dict[str, Optional[str]]:
        """Text and color field values keyed by field name."""
        return {name: getattr(self, name) for name in TEXT_FIELDS + COLOR_FIELDS}

    def to_slide(self, **overrides) -> Slide:
        """Build a Slide, filling gaps from ``overrides`` and Slide defaults."""
        data: dict[str, Any] = {k: v for k, v in self.fields().items() if v is not None}
        if self.layout_type:
            data["layout_type"] = self.layout_type
        if self.carousel_id:
            data["carousel_id"] = self.carousel_id
        if self.slide_number:
            data["slide_number"] = self.slide_number
        data.update(overrides)
        data.setdefault("slide_number", 1)
        return Slide(**data)
