# brickdeals/storage/sqlite_store.py

"""SQLite-backed document store for deals and sales."""

import json
import logging
import re
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from brickdeals.config.settings import Settings
from brickdeals.storage.record_store import (
    Document,
    FieldCondition,
    RecordStore,
    SortSpec,
    StoreUnavailableError,
)

logger = logging.getLogger("brickdeals.store")

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS records (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    collection TEXT    NOT NULL,
    doc        TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_records_collection
    ON records(collection, id);
"""


def _json_path(field: str) -> str:
    """Build a json_extract path, rejecting anything but plain names."""
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid field name: {field!r}")
    return f"$.{field}"


def _where_clause(
    collection: str, conditions: Sequence[FieldCondition],
) -> tuple[str, list[Any]]:
    """Translate conditions into a SQL WHERE clause and parameters."""
    clauses = ["collection = ?"]
    params: list[Any] = [collection]

    for cond in conditions:
        path = _json_path(cond.field)
        if cond.op == "eq":
            clauses.append("json_extract(doc, ?) = ?")
            params.extend([path, cond.value])
        elif cond.op == "lte":
            clauses.append("json_extract(doc, ?) <= ?")
            params.extend([path, cond.value])
        elif cond.op == "prefix":
            prefix = str(cond.value)
            clauses.append("substr(json_extract(doc, ?), 1, ?) = ?")
            params.extend([path, len(prefix), prefix])
        elif cond.op == "not_null":
            clauses.append("json_extract(doc, ?) IS NOT NULL")
            params.append(path)

    return " AND ".join(clauses), params


class SqliteRecordStore(RecordStore):
    """Stores each record as a JSON document in a single table.

    Documents keep their insertion order through the autoincrement
    key, which is also the tiebreaker for every explicit sort.
    ``replace_all`` runs inside one transaction, so readers of this
    store never observe the emptied collection.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        path = db_path or Settings.DB_PATH
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            raise StoreUnavailableError(
                f"Cannot open record store at {path}: {exc}"
            ) from exc
        logger.debug("SqliteRecordStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def replace_all(
        self, collection: str, records: Sequence[Document],
    ) -> int:
        """Delete every document of *collection* and insert *records*."""
        rows = [
            (collection, json.dumps(record, ensure_ascii=False))
            for record in records
        ]
        try:
            with self._conn:
                deleted = self._conn.execute(
                    "DELETE FROM records WHERE collection = ?",
                    (collection,),
                ).rowcount
                self._conn.executemany(
                    "INSERT INTO records (collection, doc) VALUES (?, ?)",
                    rows,
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(
                f"replace_all failed for '{collection}': {exc}"
            ) from exc

        logger.info(
            "Replaced '%s': %d removed, %d inserted",
            collection,
            deleted,
            len(rows),
        )
        return len(rows)

    def find(
        self,
        collection: str,
        conditions: Sequence[FieldCondition] = (),
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        """Return matching documents, sorted then sliced."""
        where, params = _where_clause(collection, conditions)
        order = "id ASC"
        if sort is not None:
            direction = "DESC" if sort.descending else "ASC"
            order = f"json_extract(doc, ?) {direction}, id ASC"
            params.append(_json_path(sort.field))

        sql = f"SELECT doc FROM records WHERE {where} ORDER BY {order}"
        sql += " LIMIT ? OFFSET ?"
        params.extend([-1 if limit is None else limit, max(skip, 0)])

        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(
                f"find failed for '{collection}': {exc}"
            ) from exc
        return [json.loads(r[0]) for r in rows]

    def count(
        self,
        collection: str,
        conditions: Sequence[FieldCondition] = (),
    ) -> int:
        """Count documents matching all conditions."""
        where, params = _where_clause(collection, conditions)
        try:
            row = self._conn.execute(
                f"SELECT COUNT(*) FROM records WHERE {where}", params,
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(
                f"count failed for '{collection}': {exc}"
            ) from exc
        return int(row[0])
