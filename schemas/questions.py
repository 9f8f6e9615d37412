from typing import List

from pydantic import BaseModel, ConfigDict, Field


class PublicQuestionOut(BaseModel):
    """Today's question without the answer."""

    model_config = ConfigDict(populate_by_name=True)
    id: int
    question: str
    options: List[str]
    category: str
    question_number: int = Field(alias="questionNumber")


class QuestionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    id: int
    question: str
    options: List[str]
    correct: int
    category: str
    fun_fact: str = Field(alias="funFact")
