from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from bank import Question, QuestionCatalog
from daykey import Clock, question_number
from errors import AlreadyPlayedError, InvalidAnswerIndex, StaleRecordError, StorageError
from schemas.users import AnswerEntry, UserRecord
from selector import select
from store import UserStore

logger = logging.getLogger("daily-trivia.processor")

MAX_CONFLICT_RETRIES = 3


class PlayState(str, Enum):
    NOT_PLAYED_TODAY = "not_played_today"
    PLAYED_TODAY = "played_today"


def play_state(record: UserRecord, today: date) -> PlayState:
    # derived from lastPlayed; resets by itself when the day key moves on
    if record.last_played == today:
        return PlayState.PLAYED_TODAY
    return PlayState.NOT_PLAYED_TODAY


def next_streak(record: UserRecord, is_correct: bool, yesterday: date) -> int:
    if not is_correct:
        return 0
    if record.last_played == yesterday and record.last_correct:
        return record.current_streak + 1
    return 1


class UserLocks:
    """
    One lock per fid, so submissions for different users never wait on each
    other. Entries live only while some caller holds a reference to the lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[int, threading.Lock] = weakref.WeakValueDictionary()

    def __call__(self, fid: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(fid)
            if lock is None:
                lock = self._locks[fid] = threading.Lock()
            return lock

    def __len__(self) -> int:
        return len(self._locks)


# shared by every processor in the process
USER_LOCKS = UserLocks()


@dataclass(frozen=True)
class SubmitResult:
    is_correct: bool
    correct_index: int
    fun_fact: str
    record: UserRecord


@dataclass(frozen=True)
class UserStatus:
    record: UserRecord
    state: PlayState
    todays_answer: Optional[AnswerEntry]

    @property
    def has_played_today(self) -> bool:
        return self.state is PlayState.PLAYED_TODAY


class AnswerProcessor:
    def __init__(
        self,
        store: UserStore,
        catalog: QuestionCatalog,
        clock: Clock,
        locks: UserLocks = USER_LOCKS,
    ):
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.locks = locks

    def todays_question(self) -> Question:
        return select(self.catalog, self.clock.today())

    def question_number(self) -> int:
        return question_number(self.clock.today())

    def status(self, fid: int) -> UserStatus:
        today = self.clock.today()
        record = self.store.get_or_create(fid)
        return UserStatus(record, play_state(record, today), record.answer_for(today))

    def refresh_username(self, fid: int, username: str) -> UserRecord:
        with self.locks(fid):
            for _ in range(MAX_CONFLICT_RETRIES):
                record = self.store.get_or_create(fid)
                if record.username == username:
                    return record
                try:
                    return self.store.upsert(record.model_copy(update={"username": username}))
                except StaleRecordError:
                    logger.warning("username refresh for %s hit a write conflict, retrying", fid)
        raise StorageError(f"user {fid}: gave up after {MAX_CONFLICT_RETRIES} write conflicts")

    def submit(self, fid: int, answer_index: int, username: Optional[str] = None) -> SubmitResult:
        today = self.clock.today()
        yesterday = self.clock.yesterday()
        question = select(self.catalog, today)

        with self.locks(fid):
            # another process may share the store; a conflict means re-read and re-check
            for _ in range(MAX_CONFLICT_RETRIES):
                record = self.store.get_or_create(fid)
                updated, is_correct = self._score(record, question, answer_index, today, yesterday, username)
                try:
                    saved = self.store.upsert(updated)
                except StaleRecordError:
                    logger.warning("answer for %s hit a write conflict, retrying", fid)
                    continue
                logger.info(
                    "fid=%s day=%s question=%s correct=%s streak=%d",
                    fid,
                    today.isoformat(),
                    question.id,
                    is_correct,
                    saved.current_streak,
                )
                return SubmitResult(is_correct, question.correct_index, question.fun_fact, saved)
        raise StorageError(f"user {fid}: gave up after {MAX_CONFLICT_RETRIES} write conflicts")

    @staticmethod
    def _score(
        record: UserRecord,
        question: Question,
        answer_index: int,
        today: date,
        yesterday: date,
        username: Optional[str],
    ) -> Tuple[UserRecord, bool]:
        if play_state(record, today) is PlayState.PLAYED_TODAY:
            raise AlreadyPlayedError(record, record.answer_for(today))

        if isinstance(answer_index, bool) or not 0 <= answer_index < len(question.options):
            raise InvalidAnswerIndex(answer_index, len(question.options))

        is_correct = answer_index == question.correct_index
        streak = next_streak(record, is_correct, yesterday)
        answers = dict(record.answers)
        answers[today] = AnswerEntry(correct=is_correct, date=today)

        updated = UserRecord(
            fid=record.fid,
            username=username or record.username,
            current_streak=streak,
            longest_streak=max(streak, record.longest_streak),
            last_played=today,
            last_correct=is_correct,
            total_played=record.total_played + 1,
            total_correct=record.total_correct + (1 if is_correct else 0),
            answers=answers,
            version=record.version,
        )
        return updated, is_correct
