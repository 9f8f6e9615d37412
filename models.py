from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import JSON, BigInteger, Boolean, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


class UserRow(Base):
    __tablename__ = "users"
    fid: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, index=True)
    last_played: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    total_played: Mapped[int] = mapped_column(Integer, default=0)
    total_correct: Mapped[int] = mapped_column(Integer, default=0)
    answers: Mapped[dict] = mapped_column(JSON, default=dict)  # {"YYYY-MM-DD": {"correct", "date"}}
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    # UPDATE ... WHERE version = :loaded; zero rows matched -> StaleDataError
    __mapper_args__ = {
        "version_id_col": version,
    }
