"""Pydantic models for projects, carousels and slides."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class LayoutType(str, Enum):
    """Built-in layout variants."""

    DICTIONARY_ENTRY = "dictionary_entry"
    BOLD_CALLOUT = "bold_callout"
    HEADER_BODY = "header_body"
    QUOTE_HIGHLIGHT = "quote_highlight"
    MINIMALIST_FOCUS = "minimalist_focus"


CUSTOM_LAYOUT_PREFIX = "custom-"
DEFAULT_LAYOUT = LayoutType.HEADER_BODY

TEXT_FIELDS = ("title", "subtitle", "body_text", "quote")
COLOR_FIELDS = ("background_color", "font_color", "accent_color")


class Slide(BaseModel):
    """A single slide within a carousel.

    ``layout_type`` is a weak reference: either a LayoutType value or
    ``custom-<layout id>``. Unknown values render with the default layout.
    """

    id: str = Field(default_factory=lambda: new_id("slide"), frozen=True)
    carousel_id: str
    slide_number: int = Field(ge=1, description="1-based position within the carousel")
    layout_type: str = DEFAULT_LAYOUT.value
    title: Optional[str] = None
    subtitle: Optional[str] = None
    body_text: Optional[str] = None
    quote: Optional[str] = None
    background_color: str = "#ffffff"
    font_color: str = "#000000"
    accent_color: str = "#3b82f6"

    def text_fields(self) -> dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in TEXT_FIELDS}


class Carousel(BaseModel):
    """A named, ordered sequence of slides."""

    id: str = Field(default_factory=lambda: new_id("carousel"))
    name: str
    slides: list[Slide] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_slide_numbers(self) -> "Carousel":
        numbers = [s.slide_number for s in self.slides]
        if len(set(numbers)) != len(numbers):
            raise ValueError(f"Duplicate slide numbers in carousel '{self.name}': {numbers}")
        if numbers != sorted(numbers):
            raise ValueError(f"Slide numbers out of order in carousel '{self.name}': {numbers}")
        return self

    def renumber(self) -> None:
        """Rewrite slide numbers to 1..n following the sequence order."""
        for index, slide in enumerate(self.slides, start=1):
            slide.slide_number = index

    def add_slide(self, position: Optional[int] = None, **fields) -> Slide:
        """Create a slide at ``position`` (0-based, default: end) and renumber."""
        slide = Slide(carousel_id=self.id, slide_number=len(self.slides) + 1, **fields)
        if position is None:
            self.slides.append(slide)
        else:
            self.slides.insert(position, slide)
        self.renumber()
        return slide

    def remove_slide(self, slide_id: str) -> None:
        self.slides = [s for s in self.slides if s.id != slide_id]
        self.renumber()

    def move_slide(self, slide_id: str, position: int) -> None:
        slide = next((s for s in self.slides if s.id == slide_id), None)
        if slide is None:
            raise ValueError(f"Slide {slide_id} is not in carousel '{self.name}'")
        self.slides.remove(slide)
        self.slides.insert(position, slide)
        self.renumber()


class ProjectMetadata(BaseModel):
    """Lightweight, derived summary of a project for listings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    slide_count: int = Field(alias="slideCount")
    carousel_count: int = Field(alias="carouselCount")
    created_at: str = Field(alias="createdAt")
    modified_at: str = Field(alias="modifiedAt")
    description: Optional[str] = None


class Project(BaseModel):
    """Top-level persistence unit: a named collection of carousels."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("project"))
    name: str
    description: Optional[str] = None
    carousels: list[Carousel] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso, alias="createdAt")
    modified_at: str = Field(default_factory=now_iso, alias="modifiedAt")

    def touch(self) -> None:
        """Mark the project as modified now."""
        self.modified_at = now_iso()

    def add_carousel(self, name: str) -> Carousel:
        carousel = Carousel(name=name)
        self.carousels.append(carousel)
        return carousel

    def find_carousel(self, carousel_id: str) -> Optional[Carousel]:
        return next((c for c in self.carousels if c.id == carousel_id), None)

    @property
    def slide_count(self) -> int:
        return sum(len(c.slides) for c in self.carousels)

    def metadata(self) -> ProjectMetadata:
        return ProjectMetadata(
            id=self.id,
            name=self.name,
            slide_count=self.slide_count,
            carousel_count=len(self.carousels),
            created_at=self.created_at,
            modified_at=self.modified_at,
            description=self.description,
        )

    def to_wire(self) -> dict:
        """JSON-ready dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)
