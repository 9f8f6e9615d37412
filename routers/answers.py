from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from deps.services import get_processor
from errors import AlreadyPlayedError, ClientInputError, StorageError
from processor import AnswerProcessor
from schemas.answers import AnswerRequest, AnswerResponse

logger = logging.getLogger("daily-trivia.answers")

router = APIRouter(prefix="/api", tags=["answers"])


@router.post(
    "/answer",
    response_model=AnswerResponse,
    responses={400: {"description": "Missing fields, bad answerIndex, or already played today"}},
)
def submit_answer(req: AnswerRequest, processor: Annotated[AnswerProcessor, Depends(get_processor)]):
    if not req.fid or req.answer_index is None:
        return JSONResponse({"error": "Missing fid or answerIndex"}, status_code=400)

    try:
        result = processor.submit(req.fid, req.answer_index, req.username)
    except AlreadyPlayedError as e:
        # normal traffic, not an error
        logger.info("fid=%s already played today", req.fid)
        answer = e.todays_answer
        return JSONResponse(
            {
                "error": "Already played today",
                "user": e.record.to_api(),
                "todaysAnswer": answer.model_dump(mode="json") if answer else None,
            },
            status_code=400,
        )
    except ClientInputError as e:
        return JSONResponse({"error": "Invalid answerIndex", "detail": str(e)}, status_code=400)
    except StorageError:
        logger.exception("answer for fid=%s not saved", req.fid)
        return JSONResponse({"error": "Storage unavailable"}, status_code=500)

    return AnswerResponse(
        success=True,
        is_correct=result.is_correct,
        correct_answer=result.correct_index,
        user=result.record.to_api(),
        fun_fact=result.fun_fact,
    )
