import logging
from typing import Optional, Union

from .mongo_adapter import MongoAdapter
from .nosql_adapter import NoSQLAdapter

logger = logging.getLogger(__name__)

DocumentAdapter = Union[NoSQLAdapter, MongoAdapter]

SUPPORTED_BACKENDS = ("sqlite", "mongo")


def get_nosql_adapter(
    backend: str = "sqlite",
    db_path: str = "cloudbox.db",
    mongodb_uri: Optional[str] = None,
) -> DocumentAdapter:
    """Return the document adapter for the configured metadata backend."""
    if backend == "mongo":
        return MongoAdapter(mongodb_uri)
    if backend == "sqlite":
        return NoSQLAdapter(db_path)
    raise ValueError(f"Unknown metadata backend: {backend}. Must be one of {SUPPORTED_BACKENDS}")


def init_db(adapter: DocumentAdapter) -> None:
    """Create collections and indexes for the metadata store."""
    adapter.init_collections()
    logger.info(f"Metadata store initialized using {type(adapter).__name__}")
