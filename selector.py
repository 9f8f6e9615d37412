from __future__ import annotations

from datetime import date
from typing import Sequence

from bank import Question
from errors import EmptyCatalogError


def day_seed(day: date) -> int:
    # 2026-10-18 -> 20261018
    return day.year * 10000 + day.month * 100 + day.day


def select(catalog: Sequence[Question], day: date) -> Question:
    """
    The question for `day`. Pure: same catalog + same day gives the same
    question in every process. Days cycle through the catalog once it is
    exhausted.
    """
    if len(catalog) == 0:
        raise EmptyCatalogError()
    return catalog[day_seed(day) % len(catalog)]
