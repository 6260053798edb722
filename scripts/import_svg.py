#!/usr/bin/env python3
"""Import SVG documents as custom layouts, or rebuild a project from exports.

Usage:
    # Custom layouts (JSON list), optionally saved to the data root
    python scripts/import_svg.py layouts design1.svg design2.svg -o layouts.json --save

    # Project from previously exported documents
    python scripts/import_svg.py project exports/Demo/ --name Demo -o demo.json
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from goround.pipelines import ImportPipeline
from goround.schemas import AppConfig, ImportedFile
from goround.storage import LocalHostBridge, StorageContext
from goround.utils.file_utils import find_svg_files, save_json

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def collect_files(inputs: list[Path]) -> list[ImportedFile]:
    paths: list[Path] = []
    for path in inputs:
        if path.is_dir():
            paths.extend(find_svg_files(path))
        else:
            paths.append(path)
    return [
        ImportedFile(name=p.stem, path=str(p), content=p.read_text(encoding="utf-8"))
        for p in paths
    ]


async def import_layouts(args, files: list[ImportedFile]) -> int:
    config = AppConfig.from_yaml(args.config) if args.config.exists() else AppConfig()
    context = StorageContext(config, LocalHostBridge(user_data=config.storage.data_root))
    pipeline = ImportPipeline(context.provider)

    result = pipeline.import_documents(files)
    for failure in result.failures:
        print(f"  failed: {failure.name}: {failure.error}", file=sys.stderr)
    save_json([t.to_wire() for t in result.templates], args.output)
    if args.save and result.templates:
        await pipeline.save_templates(result.templates)
    print(f"Layouts imported: {len(result.templates)} of {len(files)} -> {args.output}")
    return 0 if result.success else 1


def import_project(args, files: list[ImportedFile]) -> int:
    project, failures = ImportPipeline().reconstruct_project(args.name, files)
    for failure in failures:
        print(f"  failed: {failure.name}: {failure.error}", file=sys.stderr)
    save_json(project.to_wire(), args.output)
    print(f"Project reconstructed: {project.slide_count} slides in "
          f"{len(project.carousels)} carousels -> {args.output}")
    return 0 if project.slide_count else 1


def main():
    parser = argparse.ArgumentParser(description="Import SVG documents")
    parser.add_argument("mode", choices=["layouts", "project"],
                        help="'layouts' for custom layouts, 'project' to rebuild a project")
    parser.add_argument("inputs", type=Path, nargs="+", help="SVG files or directories")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output JSON path")
    parser.add_argument("--name", default="Imported Project", help="Project name (project mode)")
    parser.add_argument("--save", action="store_true", help="Save imported layouts to the data root")
    parser.add_argument("--config", type=Path, default=Path("config/default.yaml"),
                        help="Application config YAML")
    args = parser.parse_args()

    missing = [p for p in args.inputs if not p.exists()]
    if missing:
        print(f"Error: Not found: {', '.join(str(p) for p in missing)}", file=sys.stderr)
        sys.exit(1)

    files = collect_files(args.inputs)
    if not files:
        print("Error: No SVG files found", file=sys.stderr)
        sys.exit(1)

    if args.mode == "layouts":
        args.output = args.output or Path("layouts.json")
        sys.exit(asyncio.run(import_layouts(args, files)))
    args.output = args.output or Path("project.json")
    sys.exit(import_project(args, files))


if __name__ == "__main__":
    main()
