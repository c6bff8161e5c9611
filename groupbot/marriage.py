"""Daily group marriage registry kept in SQLite, one table per group."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from pathlib import Path
from typing import Iterator

UPDATE_TABLE = "updateinfo"
DATE_FORMAT = "%Y/%m/%d"

_COLUMNS = "user, target, username, targetname, updatetime"


class RegistryError(Exception):
    """Raised when the registry database cannot be read or written."""


class Status(IntEnum):
    """Where a member stands in today's registry."""

    WIFE = 0
    HUSBAND = 1
    SINGLE = 3


@dataclass(frozen=True)
class Couple:
    """One marriage record; a target of 0 marks a declared single."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


def _stamp(today: date | str) -> str:
    if isinstance(today, date):
        return today.strftime(DATE_FORMAT)
    return str(today)


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class MarriageRegistry:
    """The marriage office: registers, looks up and dissolves couples."""

    def __init__(self, path: str | Path) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise RegistryError(str(exc)) from exc

    @staticmethod
    def _create_group(conn: sqlite3.Connection, table: str) -> None:
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(table)} ("
            "user INTEGER PRIMARY KEY NOT NULL, target INTEGER NOT NULL, "
            "username TEXT NOT NULL, targetname TEXT NOT NULL, "
            "updatetime TEXT NOT NULL)"
        )

    @staticmethod
    def _create_updates(conn: sqlite3.Connection) -> None:
        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {UPDATE_TABLE} ("
            "gid INTEGER PRIMARY KEY NOT NULL, updatetime TEXT NOT NULL)"
        )

    @staticmethod
    def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table,),
        ).fetchone()
        return row is not None

    @staticmethod
    def _touch(conn: sqlite3.Connection, table: str, stamp: str) -> None:
        try:
            gid = int(table)
        except ValueError:
            gid = 0
        conn.execute(
            f"REPLACE INTO {UPDATE_TABLE} (gid, updatetime) VALUES (?, ?)",
            (gid, stamp),
        )

    @staticmethod
    def _find(conn: sqlite3.Connection, table: str, column: str, value: int) -> Couple | None:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM {_quote(table)} WHERE {column} = ? LIMIT 1",
            (value,),
        ).fetchone()
        return Couple(*row) if row else None

    @staticmethod
    def _insert(conn: sqlite3.Connection, table: str, couple: Couple) -> None:
        conn.execute(
            f"REPLACE INTO {_quote(table)} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (couple.user, couple.target, couple.username,
             couple.targetname, couple.updatetime),
        )

    def check_update(self, gid: int, today: date | str) -> str:
        """Return the date the group's registry was last reset.

        A group seen for the first time is stamped with today.
        """
        stamp = _stamp(today)
        with self._session() as conn:
            self._create_updates(conn)
            row = conn.execute(
                f"SELECT updatetime FROM {UPDATE_TABLE} WHERE gid IS ? LIMIT 1",
                (gid,),
            ).fetchone()
            if row is None:
                self._touch(conn, str(gid), stamp)
                return stamp
            return row[0]

    def reset(self, gid: int | str, today: date | str) -> None:
        """Clear one group's registry, or every group's when gid is "ALL"."""
        stamp = _stamp(today)
        with self._session() as conn:
            self._create_updates(conn)
            if str(gid) != "ALL":
                table = str(gid)
                if not self._table_exists(conn, table):
                    self._create_group(conn, table)
                    return
                conn.execute(f"DROP TABLE {_quote(table)}")
                self._touch(conn, table, stamp)
                return
            tables = [
                name
                for (name,) in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table'"
                )
                if name != UPDATE_TABLE and not name.startswith("sqlite_")
            ]
            for table in tables:
                conn.execute(f"DROP TABLE {_quote(table)}")
                self._touch(conn, table, stamp)

    def divorce_wife(self, gid: int, wife: int) -> None:
        """Remove the couple in which the given member is the wife."""
        with self._session() as conn:
            conn.execute(f"DELETE FROM {_quote(str(gid))} WHERE target = ?", (wife,))

    def divorce_husband(self, gid: int, husband: int) -> None:
        """Remove the couple in which the given member is the husband."""
        with self._session() as conn:
            conn.execute(f"DELETE FROM {_quote(str(gid))} WHERE user = ?", (husband,))

    def remarry(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date | str,
    ) -> None:
        """Register uid with target, replacing uid's own record.

        Nothing changes when both uid and target already head a record.
        """
        table = str(gid)
        with self._session() as conn:
            if (self._find(conn, table, "user", uid) is not None
                    and self._find(conn, table, "user", target) is not None):
                return
            self._insert(
                conn, table, Couple(uid, target, username, targetname, _stamp(today))
            )

    def roster(self, gid: int) -> list[Couple]:
        """Return every couple of the group, declared singles left out."""
        table = str(gid)
        with self._session() as conn:
            self._create_group(conn, table)
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM {_quote(table)} ORDER BY user"
            ).fetchall()
        return [Couple(*row) for row in rows if row[1] != 0]

    def lookup(self, gid: int, uid: int) -> tuple[Couple | None, Status]:
        """Return a member's record and their status in the group."""
        table = str(gid)
        with self._session() as conn:
            self._create_group(conn, table)
            couple = self._find(conn, table, "user", uid)
            if couple is not None:
                return couple, Status.HUSBAND
            couple = self._find(conn, table, "target", uid)
            if couple is not None:
                return couple, Status.WIFE
        return None, Status.SINGLE

    def register(
        self,
        gid: int,
        uid: int,
        target: int,
        username: str,
        targetname: str,
        today: date | str,
    ) -> None:
        """Record uid as husband of target; a target of 0 declares uid single."""
        table = str(gid)
        with self._session() as conn:
            self._create_group(conn, table)
            self._insert(
                conn, table, Couple(uid, target, username, targetname, _stamp(today))
            )

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._conn.close()