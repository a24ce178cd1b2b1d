# ABOUTME: Public API for the Lyyyra song database layer.
# ABOUTME: Exports connection management, schema versioning, catalog writes, and queries.

from lyyyra.db.catalog import SongCatalog
from lyyyra.db.connection import (
    MigrationError,
    connect,
    detect_schema_version,
    initialize_database,
    open_songbook_db,
)
from lyyyra.db.mapping import Projection, SongHeader, SongSummary
from lyyyra.db.queries import QueryError, SongQueries
from lyyyra.db.sorting import SortOption

__all__ = [
    "MigrationError",
    "Projection",
    "QueryError",
    "SongCatalog",
    "SongHeader",
    "SongQueries",
    "SongSummary",
    "SortOption",
    "connect",
    "detect_schema_version",
    "initialize_database",
    "open_songbook_db",
]
