#!/usr/bin/env python3
"""Render one slide to an SVG document.

Usage:
    python scripts/render_slide.py slide.json -o slide.svg
    python scripts/render_slide.py slide.json -o slide.svg --preset story --no-metadata

The slide JSON uses the persisted slide shape (carousel_id, slide_number,
layout_type, title, ...). Font settings, custom fonts and custom layouts are
read from the configured data root.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from goround.pipelines import ExportPipeline
from goround.schemas import AppConfig, Slide
from goround.storage import LocalHostBridge, StorageContext
from goround.utils.file_utils import load_json

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


async def render(args) -> str:
    config = AppConfig.from_yaml(args.config) if args.config.exists() else AppConfig()
    if args.no_metadata:
        config.export.include_metadata = False
    slide = Slide.model_validate(load_json(args.slide))

    context = StorageContext(config, LocalHostBridge(user_data=config.storage.data_root))
    pipeline = ExportPipeline(context.provider, config)
    return await pipeline.render_slide(slide, args.preset)


def main():
    parser = argparse.ArgumentParser(description="Render a slide JSON file to SVG")
    parser.add_argument("slide", type=Path, help="Path to slide JSON")
    parser.add_argument("-o", "--output", type=Path, default=Path("slide.svg"),
                        help="Output SVG path (default: slide.svg)")
    parser.add_argument("--preset", default=None, help="Export preset id (default: from config)")
    parser.add_argument("--config", type=Path, default=Path("config/default.yaml"),
                        help="Application config YAML")
    parser.add_argument("--no-metadata", action="store_true",
                        help="Omit the goround metadata block")
    args = parser.parse_args()

    if not args.slide.exists():
        print(f"Error: Slide file not found: {args.slide}", file=sys.stderr)
        sys.exit(1)

    svg = asyncio.run(render(args))
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(svg, encoding="utf-8")
    print(f"Slide rendered: {args.output}")


if __name__ == "__main__":
    main()
