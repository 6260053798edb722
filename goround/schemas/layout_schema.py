"""Pydantic models for user-authored layout variants."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .carousel_schema import CUSTOM_LAYOUT_PREFIX, new_id, now_iso


class CustomLayout(BaseModel):
    """A named layout built from HTML/CSS templates with ``{{placeholder}}`` tokens.

    Slides reference a custom layout through ``layout_type = "custom-<id>"``.
    Layouts imported from external SVG documents keep their provenance in
    the ``is_from_figma`` / ``original_svg`` / ``detected_*`` fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("layout"))
    name: str
    description: str = ""
    html_template: str = Field(default="", alias="htmlTemplate")
    css_template: str = Field(default="", alias="cssTemplate")
    created_at: str = Field(default_factory=now_iso, alias="createdAt")
    modified_at: Optional[str] = Field(default=None, alias="modifiedAt")

    # Figma import metadata
    is_from_figma: Optional[bool] = Field(default=None, alias="isFromFigma")
    original_svg: Optional[str] = Field(default=None, alias="originalSvg")
    detected_fonts: Optional[list[str]] = Field(default=None, alias="detectedFonts")
    detected_colors: Optional[dict[str, str]] = Field(default=None, alias="detectedColors")

    @property
    def layout_type(self) -> str:
        """The ``layout_type`` value slides use to reference this layout."""
        return f"{CUSTOM_LAYOUT_PREFIX}{self.id}"

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
