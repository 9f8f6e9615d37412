from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from deps.services import get_processor
from processor import AnswerProcessor
from schemas.questions import PublicQuestionOut

router = APIRouter(prefix="/api", tags=["questions"])


@router.get("/question", response_model=PublicQuestionOut)
def todays_question(processor: Annotated[AnswerProcessor, Depends(get_processor)]):
    # Public view: no correct index, no fun fact
    q = processor.todays_question()
    return PublicQuestionOut(
        id=q.id,
        question=q.text,
        options=list(q.options),
        category=q.category,
        question_number=processor.question_number(),
    )
