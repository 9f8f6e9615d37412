from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class AnswerRequest(BaseModel):
    # both optional so a missing field is reported as {"error": ...}, not a 422
    model_config = ConfigDict(populate_by_name=True)
    fid: Optional[StrictInt] = None
    username: Optional[str] = Field(default=None, max_length=64)
    answer_index: Optional[StrictInt] = Field(default=None, alias="answerIndex")


class AnswerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool
    is_correct: bool = Field(alias="isCorrect")
    correct_answer: int = Field(alias="correctAnswer")
    user: dict
    fun_fact: str = Field(alias="funFact")
