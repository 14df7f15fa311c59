# Overview: Persisted sequence counters (local file, in-memory, or record-store backed).

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from contextlib import suppress
from pathlib import Path

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import SequenceCounter
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)

PRODUCT_COUNTER_KEY = "asel_product_counter"
INVOICE_COUNTER_KEY = "asel_invoice_counter"
PURCHASE_INVOICE_COUNTER_KEY = "asel_purchase_invoice_counter"

_COUNTER_RE = re.compile(r"\s*([+-]?\d+)")


class CounterStoreError(Exception):
    """Raised when a counter backend cannot be read or written."""
    pass


def parse_counter(raw) -> int:
    """
    Stored counter text -> int.

    Leading digits are read and trailing junk ignored ("12abc" -> 12), so a
    hand-edited value never restarts the sequence. Absent or digit-less values
    count as 0.
    """
    if raw is None:
        return 0
    match = _COUNTER_RE.match(str(raw))
    return int(match.group(1)) if match else 0


class CounterStore:
    """
    String key/value store holding one counter per sequence domain.

    Subclasses provide get/set; increment() is a read-modify-write on top
    of them unless the backend can do it atomically.
    """

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def increment(self, key: str) -> int:
        counter = parse_counter(self.get(key)) + 1
        self.set(key, str(counter))
        return counter


class MemoryCounterStore(CounterStore):
    def __init__(self, initial: dict | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)


class FileCounterStore(CounterStore):
    """
    JSON object on disk, one string value per key.

    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError:
            logger.warning("Counter file %s is corrupt; starting from empty", self.path)
            return {}
        except OSError as exc:
            raise CounterStoreError(f"Cannot read counter file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            return {}
        return data

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".counters-", suffix=".json")
        except OSError as exc:
            raise CounterStoreError(f"Cannot write counter file {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise CounterStoreError(f"Cannot write counter file {self.path}: {exc}") from exc


class SqlCounterStore(CounterStore):
    """
    Counters kept as rows of sequence_counters.

    increment() is a single UPDATE value = value + 1 followed by a read in
    the same transaction, so concurrent writers serialize on the row.
    """

    def __init__(self, session):
        self.session = session

    def get(self, key: str) -> str | None:
        value = (
            self.session.query(SequenceCounter.value)
            .filter_by(key=key)
            .scalar()
        )
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        counter = parse_counter(value)

        def _op() -> None:
            row = self.session.query(SequenceCounter).filter_by(key=key).first()
            if row is None:
                self.session.add(SequenceCounter(key=key, value=counter))
            else:
                row.value = counter
            self.session.commit()

        self._run(_op)

    def increment(self, key: str) -> int:
        stmt = (
            update(SequenceCounter)
            .where(SequenceCounter.key == key)
            .values(value=SequenceCounter.value + 1)
        )

        def _read() -> int:
            self.session.flush()
            return (
                self.session.query(SequenceCounter.value)
                .filter_by(key=key)
                .scalar()
            )

        def _op() -> int:
            result = self.session.execute(stmt)
            if result.rowcount:
                current = _read()
            else:
                self.session.add(SequenceCounter(key=key, value=1))
                try:
                    self.session.flush()
                    current = 1
                except IntegrityError:
                    # Another writer created the row first
                    self.session.rollback()
                    result = self.session.execute(stmt)
                    if not result.rowcount:
                        raise
                    current = _read()
            self.session.commit()
            return current

        return self._run(_op)

    def _run(self, op):
        try:
            return run_with_retry(op, session=self.session)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise CounterStoreError(f"Counter update failed: {exc}") from exc


def counter_store_from_config(config: dict, *, session=None, instance_path: str | None = None) -> CounterStore:
    """
    Build the configured counter backend.

    COUNTER_BACKEND="file" keeps counters in COUNTER_FILE (relative paths
    resolve against the instance folder); anything else uses the record store.
    """
    backend = (config.get("COUNTER_BACKEND") or "sql").lower()
    if backend == "file":
        path = Path(config.get("COUNTER_FILE") or "counters.json")
        if not path.is_absolute() and instance_path:
            path = Path(instance_path) / path
        return FileCounterStore(path)
    if session is None:
        raise CounterStoreError("sql counter backend requires a session")
    return SqlCounterStore(session)


def default_counter_store() -> CounterStore:
    """Counter backend configured for the current app."""
    return counter_store_from_config(
        current_app.config,
        session=db.session,
        instance_path=current_app.instance_path,
    )
