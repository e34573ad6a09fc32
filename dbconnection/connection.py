"""PostgreSQL connection wrapper with list-aware named parameters."""

import itertools
import logging
import os
from typing import Any, Callable, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from .statement import build_statement

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
UNBUFFERED_ITERSIZE = 2000


def parse_host(host: str) -> dict:
    """Split a `host[:socket]` string into psycopg2 connect arguments.

    `"db:/var/run/postgresql"` selects the socket directory instead of the
    host. A purely numeric suffix is taken as a port. Any other suffix is
    rejected with ValueError.
    """
    name, sep, suffix = host.partition(":")
    if not sep or not name or not suffix:
        return {"host": host}
    if suffix.isdigit():
        return {"host": name, "port": int(suffix)}
    # libpq only treats a host starting with "/" as a unix socket directory
    if not suffix.startswith("/"):
        raise ValueError(f"Socket path must be absolute, got {suffix!r}")
    return {"host": suffix}


class DatabaseConnection:
    """Owns one psycopg2 connection and runs templated queries on it.

    Usage:
        with DatabaseConnection("app", "app", "secret", "localhost") as db:
            rows = db.query_select(
                "SELECT * FROM users WHERE id IN (:ids)", {"ids": [1, 2, 3]}
            )
    """

    def __init__(self, dbname: str, user: str, password: str, host: str = DEFAULT_HOST):
        connect_args = parse_host(host or DEFAULT_HOST)
        logger.info(
            "Connecting to database %s as %s via %s",
            dbname, user, connect_args["host"],
        )
        self._conn = psycopg2.connect(
            dbname=dbname,
            user=user,
            password=password,
            client_encoding="UTF8",
            **connect_args,
        )
        self._conn.autocommit = True
        self._cursor_names = itertools.count()
        self.rowcount = -1
        self.use_buffered_query(True)

    @classmethod
    def from_env(cls) -> "DatabaseConnection":
        """Create a connection from DB_NAME, DB_USER, DB_PASSWORD and DB_HOST."""
        dbname = os.environ.get("DB_NAME")
        if not dbname:
            raise ValueError("DB_NAME must be set")
        return cls(
            dbname,
            os.environ.get("DB_USER", ""),
            os.environ.get("DB_PASSWORD", ""),
            os.environ.get("DB_HOST", DEFAULT_HOST),
        )

    @property
    def connection(self):
        return self._conn

    def use_buffered_query(self, status: bool) -> bool:
        """Toggle between client-side (buffered) and server-side (streamed) SELECT cursors."""
        self.buffered = bool(status)
        return True

    def _cursor(self, streaming: bool = False):
        if streaming:
            cur = self._conn.cursor(
                name=f"dbconnection_{next(self._cursor_names)}",
                cursor_factory=RealDictCursor,
                withhold=True,
            )
            cur.itersize = UNBUFFERED_ITERSIZE
            return cur
        return self._conn.cursor(cursor_factory=RealDictCursor)

    def query_select(
        self,
        query: str,
        values: Optional[dict] = None,
        single_record: bool = False,
        transform: Optional[Callable[[dict], Any]] = None,
    ):
        """Run a SELECT and collect its rows.

        `transform` is applied to every row; rows it maps to None are dropped.
        With `single_record`, only the last collected value is returned (None
        when nothing matched).
        """
        sql, params = build_statement(query, values).bind()
        output = []
        with self._cursor(streaming=not self.buffered) as cur:
            cur.execute(sql, params)
            self.rowcount = cur.rowcount
            if self.buffered and cur.description is None:
                rows = []
            else:
                rows = cur
            for row in rows:
                value = transform(row) if transform is not None else row
                if value is not None:
                    output.append(value)

        if single_record:
            return output.pop() if output else None
        return output

    def query_execute(self, query: str, values: Optional[dict] = None) -> bool:
        """Run a mutation query. Driver errors propagate."""
        sql, params = build_statement(query, values).bind()
        with self._cursor() as cur:
            cur.execute(sql, params)
            self.rowcount = cur.rowcount
        return True

    def close(self):
        if not self._conn.closed:
            self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
