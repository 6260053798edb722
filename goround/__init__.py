"""Carousel slide projects rendered to round-trippable SVG documents."""

__version__ = "0.1.0"
