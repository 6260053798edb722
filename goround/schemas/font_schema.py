"""Pydantic models for custom fonts and font settings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .carousel_schema import new_id, now_iso


class FontFormat(str, Enum):
    """Accepted font file formats."""

    TTF = "ttf"
    OTF = "otf"
    WOFF = "woff"
    WOFF2 = "woff2"

    @property
    def css_format(self) -> str:
        """Value for the ``format()`` hint of a CSS ``src`` descriptor."""
        return {
            FontFormat.TTF: "truetype",
            FontFormat.OTF: "opentype",
            FontFormat.WOFF: "woff",
            FontFormat.WOFF2: "woff2",
        }[self]

    @property
    def mime_type(self) -> str:
        return f"font/{self.value}"


class CustomFont(BaseModel):
    """A user-uploaded font, stored inline as a base64 data URL."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("font"))
    name: str
    family: str
    format: FontFormat
    base64_data: str = Field(alias="base64Data", description="data: URL with base64 payload")
    uploaded_at: str = Field(default_factory=now_iso, alias="uploadedAt")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class FontSettings(BaseModel):
    """Process-wide font choices consulted when documents are encoded."""

    model_config = ConfigDict(populate_by_name=True)

    heading_font: str = Field(default="AT-Kyrios Standard", alias="headingFont")
    body_font: str = Field(default="AT-Kyrios Text", alias="bodyFont")
    accent_font: str = Field(default="Merriweather", alias="accentFont")
    google_fonts: list[str] = Field(
        default_factory=list,
        alias="googleFonts",
        description="Externally hosted font families the user has added",
    )

    def used_families(self) -> list[str]:
        """Families referenced by the heading/body/accent roles, in that order."""
        families: list[str] = []
        for family in (self.heading_font, self.body_font, self.accent_font):
            if family not in families:
                families.append(family)
        return families

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
