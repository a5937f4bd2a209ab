"""
Idempotency ledger of fired maintenance cycles.

At most one CycleRecord exists per (schedule_id, cycle_key). record_fire is
an atomic insert-if-absent: when two evaluators race on the same cycle,
exactly one gets RECORDED and the other DUPLICATE.
"""

import sqlite3
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .cycle_record import CycleRecord
from .logger import get_logger

log = get_logger(__name__)


class RecordOutcome(Enum):
    RECORDED = "recorded"
    DUPLICATE = "duplicate"  # expected outcome, not an error


class CycleLedger:
    """Interface shared by the ledger implementations."""

    def has_fired(self, schedule_id: str, cycle_key: str) -> bool:
        raise NotImplementedError

    def record_fire(
        self, schedule_id: str, cycle_key: str, action_id: str
    ) -> RecordOutcome:
        raise NotImplementedError

    def records(self, schedule_id: Optional[str] = None) -> List[CycleRecord]:
        raise NotImplementedError


class InMemoryCycleLedger(CycleLedger):
    """Process-local ledger; the lock makes check-and-insert one step."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], CycleRecord] = {}
        self._lock = threading.Lock()

    def has_fired(self, schedule_id, cycle_key):
        with self._lock:
            return (schedule_id, cycle_key) in self._records

    def record_fire(self, schedule_id, cycle_key, action_id):
        key = (schedule_id, cycle_key)
        with self._lock:
            if key in self._records:
                log.info("Duplicate cycle %s for schedule %s", cycle_key, schedule_id)
                return RecordOutcome.DUPLICATE
            self._records[key] = CycleRecord(
                schedule_id=schedule_id,
                cycle_key=cycle_key,
                generated_action_id=action_id,
                created_at=datetime.now(),
            )
        return RecordOutcome.RECORDED

    def records(self, schedule_id=None):
        with self._lock:
            rows = list(self._records.values())
        if schedule_id is not None:
            rows = [r for r in rows if r.schedule_id == schedule_id]
        return sorted(rows, key=lambda r: (r.schedule_id, r.created_at))


_CREATE_CYCLES = """
CREATE TABLE IF NOT EXISTS cycle_records (
    schedule_id          TEXT NOT NULL,
    cycle_key            TEXT NOT NULL,
    generated_action_id  TEXT NOT NULL,
    created_at           TEXT NOT NULL,
    PRIMARY KEY (schedule_id, cycle_key)
);
"""


class SqliteCycleLedger(CycleLedger):
    """
    Ledger persisted in a sqlite file.

    The primary key on (schedule_id, cycle_key) is the uniqueness guard, so
    separate processes sharing the file are protected too.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        con = self._connect()
        try:
            con.executescript(_CREATE_CYCLES)
        finally:
            con.close()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.path, timeout=30, check_same_thread=False)
        con.row_factory = sqlite3.Row
        return con

    def has_fired(self, schedule_id, cycle_key):
        con = self._connect()
        try:
            row = con.execute(
                "SELECT 1 FROM cycle_records WHERE schedule_id = ? AND cycle_key = ?",
                (schedule_id, cycle_key),
            ).fetchone()
        finally:
            con.close()
        return row is not None

    def record_fire(self, schedule_id, cycle_key, action_id):
        con = self._connect()
        try:
            with con:
                con.execute(
                    "INSERT INTO cycle_records "
                    "(schedule_id, cycle_key, generated_action_id, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (schedule_id, cycle_key, action_id, datetime.now().isoformat()),
                )
        except sqlite3.IntegrityError:
            log.info("Duplicate cycle %s for schedule %s", cycle_key, schedule_id)
            return RecordOutcome.DUPLICATE
        finally:
            con.close()
        return RecordOutcome.RECORDED

    def records(self, schedule_id=None):
        query = "SELECT * FROM cycle_records"
        params: Tuple = ()
        if schedule_id is not None:
            query += " WHERE schedule_id = ?"
            params = (schedule_id,)
        query += " ORDER BY schedule_id, created_at"
        con = self._connect()
        try:
            rows = con.execute(query, params).fetchall()
        finally:
            con.close()
        return [
            CycleRecord(
                schedule_id=row["schedule_id"],
                cycle_key=row["cycle_key"],
                generated_action_id=row["generated_action_id"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
