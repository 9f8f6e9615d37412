from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from bank import QuestionCatalog, get_catalog
from daykey import Clock
from processor import AnswerProcessor
from store import UserStore, make_store


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return Clock()


@lru_cache(maxsize=1)
def get_store() -> UserStore:
    """Built once per process from USER_STORE / USERS_FILE."""
    return make_store()


def get_processor(
    store: Annotated[UserStore, Depends(get_store)],
    catalog: Annotated[QuestionCatalog, Depends(get_catalog)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AnswerProcessor:
    return AnswerProcessor(store, catalog, clock)
