from __future__ import annotations

from typing import Any, Optional


class TriviaError(Exception):
    """Base class for everything the trivia core raises on purpose."""


# ---------- Client input (HTTP 400, no state change) ----------


class ClientInputError(TriviaError):
    pass


class InvalidAnswerIndex(ClientInputError):
    def __init__(self, answer_index: Any, option_count: int):
        super().__init__(f"answerIndex {answer_index!r} out of range 0..{option_count - 1}")
        self.answer_index = answer_index
        self.option_count = option_count


class AlreadyPlayedError(TriviaError):
    """
    Second submission for the same day key. Expected under normal use;
    carries the current record so the caller can show the earlier result.
    """

    def __init__(self, record: Any, todays_answer: Optional[Any]):
        super().__init__("Already played today")
        self.record = record
        self.todays_answer = todays_answer


# ---------- Configuration (fatal at startup) ----------


class ConfigurationError(TriviaError):
    pass


class EmptyCatalogError(ConfigurationError):
    def __init__(self, source: str = "question catalog"):
        super().__init__(f"No valid questions loaded from {source}")


# ---------- Storage (HTTP 500) ----------


class StorageError(TriviaError):
    pass


class StaleRecordError(StorageError):
    def __init__(self, fid: int, expected: int, found: Optional[int]):
        super().__init__(f"user {fid}: expected version {expected}, store has {found}")
        self.fid = fid
        self.expected = expected
        self.found = found
