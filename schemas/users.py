from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AnswerEntry(BaseModel):
    model_config = ConfigDict(frozen=True)
    correct: bool
    date: date


class UserRecord(BaseModel):
    """
    Per-user play state. Wire names match the public API
    (`lastPlayed`, `lastCorrect`, `answers`); `version` is store-private.
    """

    model_config = ConfigDict(populate_by_name=True)

    fid: int
    username: Optional[str] = None
    current_streak: int = Field(default=0, ge=0, alias="currentStreak")
    longest_streak: int = Field(default=0, ge=0, alias="longestStreak")
    last_played: Optional[date] = Field(default=None, alias="lastPlayed")
    last_correct: bool = Field(default=False, alias="lastCorrect")
    total_played: int = Field(default=0, ge=0, alias="totalPlayed")
    total_correct: int = Field(default=0, ge=0, alias="totalCorrect")
    answers: Dict[date, AnswerEntry] = Field(default_factory=dict)
    version: int = Field(default=0, exclude=True)

    @model_validator(mode="after")
    def _check_invariants(self) -> "UserRecord":
        if self.longest_streak < self.current_streak:
            raise ValueError("longestStreak < currentStreak")
        if self.total_correct > self.total_played:
            raise ValueError("totalCorrect > totalPlayed")
        if self.total_played != len(self.answers):
            raise ValueError("totalPlayed does not match answers")
        if self.current_streak > 0 and not (self.last_correct and self.last_played):
            raise ValueError("active streak without a correct last answer")
        return self

    def answer_for(self, day: date) -> Optional[AnswerEntry]:
        return self.answers.get(day)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
