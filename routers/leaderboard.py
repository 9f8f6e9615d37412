from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from deps.services import get_store
from errors import StorageError
from leaderboard import API_LIMIT, rank
from store import UserStore

logger = logging.getLogger("daily-trivia.leaderboard")

router = APIRouter(prefix="/api", tags=["leaderboard"])


@router.get("/leaderboard")
def leaderboard(store: Annotated[UserStore, Depends(get_store)], limit: int = API_LIMIT):
    limit = max(1, min(limit, 100))
    try:
        records = store.all_records()
    except StorageError:
        logger.exception("leaderboard read failed")
        return JSONResponse({"error": "Storage unavailable"}, status_code=500)
    return {"leaderboard": rank(records, limit)}
