"""
Catalog Store - Read-only sources of CatalogTrack rows

The pipeline only ever needs ``list_all_tracks()``; catalogs are expected to
hold hundreds to low thousands of rows so everything is loaded in bulk.
"""
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Protocol, Sequence

from .models import UNKNOWN_ARTIST, CatalogTrack

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    def list_all_tracks(self) -> List[CatalogTrack]:
        ...


def _rows_to_tracks(rows: Iterable[Mapping[str, Any]], source: str) -> List[CatalogTrack]:
    tracks: List[CatalogTrack] = []
    skipped = 0
    for row in rows:
        try:
            tracks.append(CatalogTrack.from_row(row))
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.debug(f"Skipping catalog row from {source}: {e}")
    if skipped:
        logger.warning(f"Skipped {skipped} malformed catalog rows ({source})")
    return tracks


class InMemoryCatalogStore:
    """Catalog backed by an in-process list (tests, embedding applications)."""

    def __init__(self, tracks: Sequence[CatalogTrack]):
        self._tracks = tuple(tracks)

    def list_all_tracks(self) -> List[CatalogTrack]:
        return list(self._tracks)


class JsonCatalogStore:
    """
    Catalog stored as a JSON array of track rows.

    Rows use the label database column names (spotify_id, name, artist_main,
    artists, genres, ...); see CatalogTrack.from_row.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def list_all_tracks(self) -> List[CatalogTrack]:
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")

        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get('tracks', [])
        if not isinstance(data, list):
            raise ValueError(f"Catalog file must hold a JSON array of tracks: {self.path}")

        tracks = _rows_to_tracks(data, str(self.path))
        logger.info(f"Loaded {len(tracks)} tracks from {self.path}")
        return tracks


class SqliteCatalogStore:
    """
    Catalog stored in a SQLite table (default ``artist_tracks``).

    List-valued columns (artists, genres) are stored as JSON text.
    """

    def __init__(self, db_path: str, table: str = "artist_tracks"):
        if not table.replace('_', '').isalnum():
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = db_path
        self.table = table

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to database: {self.db_path}")
        return conn

    def list_all_tracks(self) -> List[CatalogTrack]:
        if not Path(self.db_path).exists():
            raise FileNotFoundError(f"Catalog database not found: {self.db_path}")

        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute(f"SELECT * FROM {self.table} ORDER BY rowid")
            rows = [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

        tracks = _rows_to_tracks(rows, f"{self.db_path}:{self.table}")
        logger.info(f"Retrieved {len(tracks)} tracks from {self.table}")
        return tracks


def open_catalog(path: str, backend: str = "json", table: str = "artist_tracks") -> CatalogStore:
    """Build the catalog store named by config (``json`` or ``sqlite``)."""
    backend = (backend or "json").lower()
    if backend == "sqlite":
        return SqliteCatalogStore(path, table=table)
    if backend == "json":
        return JsonCatalogStore(path)
    raise ValueError(f"Unknown catalog backend: {backend}")


def catalog_artists(tracks: Iterable[CatalogTrack]) -> List[str]:
    """Distinct artist names in catalog order (primary artists first per track)."""
    seen = set()
    names: List[str] = []
    for track in tracks:
        for artist in track.artists:
            key = artist.strip()
            if not key or key == UNKNOWN_ARTIST or key in seen:
                continue
            seen.add(key)
            names.append(key)
    return names
