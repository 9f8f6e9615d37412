from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from alembic.config import Config
from alembic.script import ScriptDirectory
from bank import QuestionCatalog, get_catalog
from db import engine
from deps.services import get_store
from store import SqlUserStore, UserStore

router = APIRouter(prefix="/health", tags=["health"])

_ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


@router.get("/db")
def health_db(store: Annotated[UserStore, Depends(get_store)]):
    if not isinstance(store, SqlUserStore):
        return {"ok": True, "backend": type(store).__name__}
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True, "backend": "sql"}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")


@router.get("/catalog")
def health_catalog(catalog: Annotated[QuestionCatalog, Depends(get_catalog)]):
    return {"ok": True, "count": len(catalog)}


def _alembic_heads() -> list[str]:
    cfg = Config(str(_ALEMBIC_INI))
    cfg.set_main_option("script_location", str(_ALEMBIC_INI.parent / "alembic"))
    script = ScriptDirectory.from_config(cfg)
    return list(script.get_heads())


@router.get("/migrations")
def health_migrations():
    heads: list[str] = []
    db_ver = None
    try:
        heads = _alembic_heads()
    except Exception:
        pass

    try:
        with engine.connect() as conn:
            try:
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
            except Exception:
                db_ver = None
    except Exception as e:
        return {
            "ok": False,
            "error": f"db_connect_failed: {e}",
            "code_heads": heads,
            "db_version": db_ver,
        }

    synced = (db_ver in heads) if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
