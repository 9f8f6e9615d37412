from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from errors import ConfigurationError, StaleRecordError, StorageError
from schemas.users import UserRecord

logger = logging.getLogger("daily-trivia.store")

USER_STORE = os.getenv("USER_STORE", "sql").lower()
USERS_FILE = os.getenv("USERS_FILE", "data/users.json")


class UserStore:
    """
    Keyed store of UserRecords.

    `upsert` is a compare-and-set on `record.version`: it fails with
    StaleRecordError if someone else wrote the user since the record was
    read. A brand-new record has version 0.
    """

    def get(self, fid: int) -> Optional[UserRecord]:
        raise NotImplementedError

    def get_or_create(self, fid: int) -> UserRecord:
        raise NotImplementedError

    def upsert(self, record: UserRecord) -> UserRecord:
        raise NotImplementedError

    def all_records(self) -> List[UserRecord]:
        raise NotImplementedError


# ---------- SQL (SQLAlchemy) ----------


def _row_to_record(row) -> UserRecord:
    return UserRecord(
        fid=row.fid,
        username=row.username,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_played=row.last_played,
        last_correct=row.last_correct,
        total_played=row.total_played,
        total_correct=row.total_correct,
        answers=row.answers or {},
        version=row.version,
    )


def _apply(row, record: UserRecord) -> None:
    row.username = record.username
    row.current_streak = record.current_streak
    row.longest_streak = record.longest_streak
    row.last_played = record.last_played
    row.last_correct = record.last_correct
    row.total_played = record.total_played
    row.total_correct = record.total_correct
    # fresh dict so the JSON column is flagged dirty
    row.answers = {k.isoformat(): v.model_dump(mode="json") for k, v in record.answers.items()}


class SqlUserStore(UserStore):
    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        if session_factory is None:
            from db import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def get(self, fid: int) -> Optional[UserRecord]:
        from models import UserRow

        try:
            with self._session_factory() as db:
                row = db.get(UserRow, fid)
                return _row_to_record(row) if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"read user {fid}: {e}") from e

    def get_or_create(self, fid: int) -> UserRecord:
        from models import UserRow

        existing = self.get(fid)
        if existing is not None:
            return existing
        try:
            with self._session_factory() as db:
                row = UserRow(fid=fid)
                _apply(row, UserRecord(fid=fid))
                db.add(row)
                db.commit()
                return _row_to_record(row)
        except IntegrityError:
            # lost the insert race; the other writer's row is as good as ours
            existing = self.get(fid)
            if existing is None:
                raise StorageError(f"user {fid} vanished after insert conflict")
            return existing
        except SQLAlchemyError as e:
            raise StorageError(f"create user {fid}: {e}") from e

    def upsert(self, record: UserRecord) -> UserRecord:
        from models import UserRow

        try:
            with self._session_factory() as db:
                row = db.get(UserRow, record.fid)
                if row is None:
                    if record.version != 0:
                        raise StaleRecordError(record.fid, record.version, None)
                    row = UserRow(fid=record.fid)
                    db.add(row)
                elif row.version != record.version:
                    raise StaleRecordError(record.fid, record.version, row.version)
                _apply(row, record)
                db.commit()
                return _row_to_record(row)
        except (StaleDataError, IntegrityError) as e:
            raise StaleRecordError(record.fid, record.version, None) from e
        except SQLAlchemyError as e:
            raise StorageError(f"write user {record.fid}: {e}") from e

    def all_records(self) -> List[UserRecord]:
        from models import UserRow

        try:
            with self._session_factory() as db:
                return [_row_to_record(r) for r in db.query(UserRow).all()]
        except SQLAlchemyError as e:
            raise StorageError(f"list users: {e}") from e


# ---------- JSON file ----------


class JsonFileUserStore(UserStore):
    """
    `{"users": {"<fid>": {...}}}` in one file. A missing or corrupt file
    reads as an empty store; writes replace the file atomically.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("users file %s unreadable, starting empty: %s", self.path, e)
            return {}
        users = data.get("users") if isinstance(data, dict) else None
        if not isinstance(users, dict):
            logger.warning("users file %s has no 'users' mapping, starting empty", self.path)
            return {}
        junk = [key for key, raw in users.items() if not isinstance(raw, dict)]
        for key in junk:
            logger.warning("users file %s: entry %r is not an object, ignored", self.path, key)
            del users[key]
        return users

    def _save(self, users: Dict[str, dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".users-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump({"users": users}, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"write {self.path}: {e}") from e

    @staticmethod
    def _parse(raw: dict) -> Optional[UserRecord]:
        try:
            return UserRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("skipping invalid user entry %r (%d errors)", raw.get("fid"), e.error_count())
            return None

    @staticmethod
    def _dump(record: UserRecord) -> dict:
        return {**record.to_api(), "version": record.version}

    def get(self, fid: int) -> Optional[UserRecord]:
        with self._lock:
            raw = self._load().get(str(fid))
        return self._parse(raw) if raw else None

    def get_or_create(self, fid: int) -> UserRecord:
        with self._lock:
            users = self._load()
            raw = users.get(str(fid))
            existing = self._parse(raw) if raw else None
            if existing is not None:
                return existing
            record = UserRecord(fid=fid, version=1)
            users[str(fid)] = self._dump(record)
            self._save(users)
            return record

    def upsert(self, record: UserRecord) -> UserRecord:
        with self._lock:
            users = self._load()
            raw = users.get(str(record.fid))
            found = raw.get("version", 0) if raw else 0
            if found != record.version:
                raise StaleRecordError(record.fid, record.version, found if raw else None)
            saved = record.model_copy(update={"version": record.version + 1})
            users[str(record.fid)] = self._dump(saved)
            self._save(users)
            return saved

    def all_records(self) -> List[UserRecord]:
        with self._lock:
            users = self._load()
        return [r for r in (self._parse(raw) for raw in users.values()) if r is not None]


def make_store(kind: Optional[str] = None) -> UserStore:
    kind = (kind or USER_STORE).lower()
    if kind == "json":
        return JsonFileUserStore(USERS_FILE)
    if kind == "sql":
        return SqlUserStore()
    raise ConfigurationError(f"Unknown USER_STORE {kind!r} (expected 'sql' or 'json')")
