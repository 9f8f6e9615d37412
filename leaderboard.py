from __future__ import annotations

from typing import Any, Dict, Iterable, List

from schemas.users import UserRecord

DEFAULT_LIMIT = 10
API_LIMIT = 20


def rank(records: Iterable[UserRecord], limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
    """Longest streak first, then most correct answers. sorted() is stable for full ties."""
    if limit <= 0:
        return []
    ordered = sorted(records, key=lambda u: (-u.longest_streak, -u.total_correct))
    return [
        {
            "fid": u.fid,
            "username": u.username,
            "streak": u.longest_streak,
            "total": u.total_correct,
        }
        for u in ordered[:limit]
    ]
