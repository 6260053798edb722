#!/usr/bin/env python3
"""Export every slide of a project as SVG documents.

Usage:
    # Folder tree: <output>/<project>/<carousel>/<carousel>-slide-001.svg
    python scripts/export_project.py project.json -o exports/

    # Single ZIP archive with the same tree
    python scripts/export_project.py project.json -o exports/ --zip --preset linkedin
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from goround.pipelines import ExportPipeline
from goround.schemas import AppConfig, Project
from goround.storage import LocalHostBridge, StorageContext
from goround.utils.file_utils import ensure_directory, load_json, sanitize_name

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


async def export(args) -> Path:
    config = AppConfig.from_yaml(args.config) if args.config.exists() else AppConfig()
    project = Project.model_validate(load_json(args.project))

    context = StorageContext(config, LocalHostBridge(user_data=config.storage.data_root))
    pipeline = ExportPipeline(context.provider, config)
    exports = await pipeline.build_carousel_exports(project, args.preset)

    if args.zip:
        archive_path = ensure_directory(args.output) / f"{sanitize_name(project.name)}.zip"
        archive_path.write_bytes(pipeline.build_archive(project, exports))
        return archive_path

    pipeline.write_folder(project, exports, args.output)
    return args.output / sanitize_name(project.name)


def main():
    parser = argparse.ArgumentParser(description="Export a project JSON file to SVG documents")
    parser.add_argument("project", type=Path, help="Path to project JSON")
    parser.add_argument("-o", "--output", type=Path, default=Path("exports"),
                        help="Export root directory (default: exports)")
    parser.add_argument("--preset", default=None, help="Export preset id (default: from config)")
    parser.add_argument("--zip", action="store_true", help="Write a ZIP archive instead of a folder tree")
    parser.add_argument("--config", type=Path, default=Path("config/default.yaml"),
                        help="Application config YAML")
    args = parser.parse_args()

    if not args.project.exists():
        print(f"Error: Project file not found: {args.project}", file=sys.stderr)
        sys.exit(1)

    result = asyncio.run(export(args))
    print(f"Project exported: {result}")


if __name__ == "__main__":
    main()
