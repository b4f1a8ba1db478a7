"""
Data access layer for the WikiLoop dataset store.

Every schema (the metadata schema and one per dataset) is a SQLite file
``<DATA_DIR>/<schema>.db`` attached read-only under its schema name, so
tables are addressed as ``"schema"."table"`` exactly like a schema-qualified
relational store.
"""

import logging
import re
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .config import settings
from .errors import InvalidIdentifierError, StoreUnavailableError

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")

STATS_TABLE = "updatecount_stats"
DATASET_NAME_TABLE = "datasetname"
LOGGING_SUFFIX = "logging"


def quote_identifier(name: str) -> str:
    """Validate a schema/table name against the allow-list and double-quote it."""
    if not name or not IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError()
    return f'"{name}"'


def table_name(dataset: str, epoch: str, suffix: Optional[str] = None) -> str:
    """
    Build the per-epoch table name.

    Args:
        dataset: Dataset (schema) name, e.g. 'missingdateofbirth'
        epoch: Epoch token, e.g. '20200101'
        suffix: Optional table suffix, e.g. 'logging'

    Returns:
        'dataset_epoch' or 'dataset_epoch_suffix'
    """
    parts = [dataset, epoch]
    if suffix:
        parts.append(suffix)
    for part in parts:
        quote_identifier(part)
    return "_".join(parts)


@dataclass
class Query:
    """A composed SELECT statement and its bound parameters."""
    sql: str
    params: Tuple = ()


def select(
    schema: str,
    table: str,
    columns: str = "*",
    where: Optional[Sequence[str]] = None,
    params: Sequence = (),
    group_by: Optional[str] = None,
    order_by: Optional[str] = None,
    limit: Optional[int] = None
) -> Query:
    """
    Compose a schema-qualified SELECT.

    ``columns``, ``where``, ``group_by`` and ``order_by`` are SQL fragments
    written by this package; request values only ever travel in ``params``.
    """
    sql = f"SELECT {columns} FROM {quote_identifier(schema)}.{quote_identifier(table)}"
    params = tuple(params)

    if where:
        sql += f" WHERE {' AND '.join(where)}"
    if group_by:
        sql += f" GROUP BY {group_by}"
    if order_by:
        sql += f" ORDER BY {order_by}"
    if limit is not None:
        sql += " LIMIT ?"
        params += (limit,)

    return Query(sql, params)


class DatasetStore:
    """
    Read-only access to the dataset schemas.
    One shared connection, safe to use from the API worker threads.
    """

    def __init__(
        self,
        data_dir: str = None,
        metadata_schema: str = None,
        datasets: Optional[Sequence[str]] = None,
        timeout: int = None
    ):
        """
        Open the store and attach the metadata and dataset schemas.

        Args:
            data_dir: Directory holding '<schema>.db' files (defaults to config setting)
            metadata_schema: Name of the metadata schema (defaults to config setting)
            datasets: Dataset schemas to attach (defaults to config setting)
            timeout: SQLite busy timeout in seconds
        """
        self.data_dir = Path(data_dir or settings.DATA_DIR)
        self.metadata_schema = metadata_schema or settings.METADATA_SCHEMA
        self.datasets = list(settings.DATASETS if datasets is None else datasets)

        metadata_path = self._schema_path(self.metadata_schema)
        if not metadata_path.exists():
            raise FileNotFoundError(f"Metadata store not found: {metadata_path}")

        self.conn = sqlite3.connect(
            "file::memory:",
            uri=True,
            check_same_thread=False,
            timeout=settings.DB_TIMEOUT if timeout is None else timeout
        )
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

        self._attach(self.metadata_schema, metadata_path)
        for dataset in self.datasets:
            path = self._schema_path(dataset)
            if not path.exists():
                logger.warning(f"Dataset store not found, skipping: {path}")
                continue
            self._attach(dataset, path)

    def _schema_path(self, schema: str) -> Path:
        quote_identifier(schema)
        return self.data_dir / f"{schema}.db"

    def _attach(self, schema: str, path: Path):
        uri = f"{path.resolve().as_uri()}?mode=ro"
        self.conn.execute(f"ATTACH DATABASE ? AS {quote_identifier(schema)}", (uri,))
        logger.debug(f"Attached {schema} from {path}")

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ----------------------------------------------------------------
    # Execution
    # ----------------------------------------------------------------

    def run(self, query: Query) -> List[Dict]:
        """
        Execute a composed query.

        Raises:
            StoreUnavailableError: on any driver error (missing table included)
        """
        try:
            with self._lock:
                cur = self.conn.execute(query.sql, query.params)
                rows = cur.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Dataset fetch failed: {e} [{query.sql}]")
            raise StoreUnavailableError() from e
        return [dict(row) for row in rows]

    def fetch(
        self,
        dataset: str,
        epoch: str,
        suffix: Optional[str] = None,
        columns: str = "*",
        where: Optional[Sequence[str]] = None,
        params: Sequence = (),
        group_by: Optional[str] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict]:
        """Select from ``"dataset"."dataset_epoch[_suffix]"``."""
        query = select(
            dataset,
            table_name(dataset, epoch, suffix),
            columns=columns,
            where=where,
            params=params,
            group_by=group_by,
            order_by=order_by,
            limit=limit
        )
        return self.run(query)

    # ----------------------------------------------------------------
    # Metadata
    # ----------------------------------------------------------------

    def list_datasets(self) -> List[str]:
        """Get the names of all published datasets."""
        rows = self.run(select(self.metadata_schema, DATASET_NAME_TABLE, "name"))
        return [row["name"] for row in rows]

    def get_epochs(self, dataset: str) -> List[str]:
        """Get all epochs of a dataset, newest first."""
        query = select(
            self.metadata_schema,
            f"{dataset}epoch",
            "epoch",
            order_by="epoch DESC"
        )
        return [str(row["epoch"]) for row in self.run(query)]

    # ----------------------------------------------------------------
    # Dataset endpoints
    # ----------------------------------------------------------------

    def dump_rows(self, dataset: str, epoch: str) -> List[Dict]:
        """Get every row of one dataset epoch."""
        return self.fetch(dataset, epoch)

    def latest_stats(self, dataset: str, epoch: str) -> List[Dict]:
        """Get the most recently added update-count stats row for an epoch."""
        query = select(
            dataset,
            STATS_TABLE,
            where=["epoch = ?"],
            params=(epoch,),
            order_by="addedtime DESC",
            limit=1
        )
        return self.run(query)

    # ----------------------------------------------------------------
    # Game logs
    # ----------------------------------------------------------------

    def decision_counts(self, dataset: str, epoch: str) -> List[Dict]:
        """Count logged editor decisions per decision value."""
        return self.fetch(
            dataset, epoch, LOGGING_SUFFIX,
            columns="decision, COUNT(*) AS num",
            group_by="decision"
        )

    def leaderboard(self, dataset: str, epoch: str) -> List[Dict]:
        """Count logged edits per user, most active first."""
        return self.fetch(
            dataset, epoch, LOGGING_SUFFIX,
            columns='"user", COUNT(*) AS num',
            group_by='"user"',
            order_by="num DESC"
        )

    def edits_by_day(self, dataset: str, epoch: str) -> List[Tuple[str, int]]:
        """Count logged edits per calendar day, as (date, count) pairs."""
        rows = self.fetch(
            dataset, epoch, LOGGING_SUFFIX,
            columns="date(changetime) AS date, COUNT(*) AS num",
            group_by="date",
            order_by="date"
        )
        return [(row["date"], row["num"]) for row in rows]
