from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from deps.services import get_processor
from errors import StorageError
from processor import AnswerProcessor
from schemas.questions import QuestionOut

logger = logging.getLogger("daily-trivia.users")

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user/{fid}")
def get_user(
    fid: str,
    processor: Annotated[AnswerProcessor, Depends(get_processor)],
    username: Optional[str] = Query(default=None, max_length=64),
):
    try:
        fid_int = int(fid)
    except ValueError:
        return JSONResponse({"error": "Invalid FID"}, status_code=400)

    try:
        if username:
            processor.refresh_username(fid_int, username)
        status = processor.status(fid_int)
    except StorageError:
        logger.exception("user lookup failed for fid=%s", fid_int)
        return JSONResponse({"error": "Storage unavailable"}, status_code=500)

    answer = status.todays_answer
    q = processor.todays_question()
    full = QuestionOut(
        id=q.id,
        question=q.text,
        options=list(q.options),
        correct=q.correct_index,
        category=q.category,
        fun_fact=q.fun_fact,
    )
    return {
        "user": status.record.to_api(),
        "hasPlayedToday": status.has_played_today,
        "todaysAnswer": answer.model_dump(mode="json") if answer else None,
        "question": full.model_dump(by_alias=True),
        "questionNumber": processor.question_number(),
    }
