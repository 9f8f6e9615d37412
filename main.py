import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bank import get_catalog
from daykey import check_settings
from db import IS_SQLITE, init_db

# Routers
from routers.answers import router as answers_router
from routers.health import router as health_router
from routers.leaderboard import router as leaderboard_router
from routers.questions import router as questions_router
from routers.users import router as users_router

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logger = logging.getLogger("daily-trivia")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="[%(asctime)s] [%(levelname)-5s] [%(name)-24s] %(message)s",
)

# A process without questions or with bad day-key settings must not serve;
# both raise ConfigurationError at import.
get_catalog()
check_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if IS_SQLITE:
        init_db()
    logger.info("Daily trivia API ready (%d questions)", len(get_catalog()))
    yield


app = FastAPI(title="Daily Trivia API", lifespan=lifespan)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    # Client input errors keep the API's {"error": ...} shape and 400 status
    return JSONResponse(
        {"error": "Invalid request", "detail": jsonable_errors(exc)},
        status_code=400,
    )


@app.get("/")
def health_root():
    return {"ok": True}


# Register routers
app.include_router(questions_router)  # /api/question
app.include_router(users_router)  # /api/user/{fid}
app.include_router(answers_router)  # /api/answer
app.include_router(leaderboard_router)  # /api/leaderboard
app.include_router(health_router)  # /health/...
