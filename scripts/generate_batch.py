"""Batch generation script.

Renders one banner per CSV row without running the API.

Usage:
    python -m scripts.generate_batch template.svg products.csv --out ./banners
    python scripts/generate_batch.py template.svg products.csv --mapping mapping.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bannergen.core.config import get_settings
from bannergen.core.factory import ComponentFactory
from bannergen.core.logging_config import get_logger, setup_logging
from bannergen.generator import BannerGenerationError, BannerGenerator

logger = get_logger("scripts.generate_batch")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate banners from an SVG template and a CSV sheet.")
    parser.add_argument("template", type=Path, help="SVG template")
    parser.add_argument("table", type=Path, help="CSV sheet, one banner per row")
    parser.add_argument("--out", type=Path, default=Path("./banners"), help="Output directory")
    parser.add_argument("--mapping", type=Path, help="JSON file mapping element ids to columns")
    parser.add_argument("--name-column", help="Column naming each banner")
    parser.add_argument("--upload", action="store_true", help="Upload banners to the asset service")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Run one batch and print a summary."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    mapping = json.loads(args.mapping.read_text(encoding="utf-8")) if args.mapping else {}

    generator = BannerGenerator(settings, ComponentFactory(settings))
    try:
        result = await generator.generate_from_files(
            args.template,
            args.table,
            args.out,
            mapping=mapping,
            name_column=args.name_column,
            upload=args.upload or None,
        )
    except BannerGenerationError as e:
        logger.error(f"Batch failed: {e}")
        print(f"Batch failed: {e}")
        return 1

    for artifact in result.artifacts:
        marker = "ok" if artifact.error is None else artifact.error
        print(f"{artifact.index:>4}  {artifact.file_name:<40} {marker}")
    print(f"{result.generated_count} generated, {result.failed_count} failed -> {args.out}")
    return 0 if result.failed_count == 0 else 2


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
