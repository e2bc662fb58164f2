#!/usr/bin/env python3
"""Seed sample memory databases for development."""

import argparse
import asyncio
import logging
from pathlib import Path

# Add src to path for development
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from memviz.config import settings
from memviz.storage import SqliteDatasetProvider, seed_folder
from memviz.storage.seeder import SAMPLE_DATASETS, write_normalized

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--folder", default=settings.memory_folder_path, help="Memory folder to seed")
    parser.add_argument(
        "--normalized",
        action="store_true",
        help="Also write normalized-schema copies (<name>-normalized.db)",
    )
    args = parser.parse_args()

    created = seed_folder(args.folder)

    if args.normalized:
        folder = Path(args.folder).resolve()
        for dataset in SAMPLE_DATASETS:
            path = folder / dataset.file_name.replace(".db", "-normalized.db")
            if path.exists():
                continue
            write_normalized(path, dataset)
            created.append(path)
            logger.info(f"Created {path.name}")

    datasets = asyncio.run(SqliteDatasetProvider(args.folder).list_datasets())
    logger.info(
        f"\nSeeding complete:\n"
        f"  Created: {len(created)}\n"
        f"  Available: {', '.join(d.id for d in datasets) or '(none)'}"
    )


if __name__ == "__main__":
    main()
