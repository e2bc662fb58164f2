"""Dataset providers and sample data."""

from memviz.storage.seeder import SAMPLE_DATASETS, SampleDataset, seed_folder, seed_folder_async
from memviz.storage.sqlite_provider import SchemaKind, SqliteDatasetProvider

__all__ = [
    "SAMPLE_DATASETS",
    "SampleDataset",
    "SchemaKind",
    "SqliteDatasetProvider",
    "seed_folder",
    "seed_folder_async",
]
