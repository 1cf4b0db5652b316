from datetime import date, datetime

from sqlalchemy import TIMESTAMP, Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.models.base import Base


class WarningState(Base):
    __tablename__ = "warning_states"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    warning_date: Mapped[date] = mapped_column(Date, nullable=False)
    soft_shown: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hard_shown: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    consecutive_limit_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=func.current_timestamp(), onupdate=func.current_timestamp()
    )

    def __init__(self, user_id: str, warning_date: date):
        self.user_id = user_id
        self.warning_date = warning_date
        self.soft_shown = False
        self.hard_shown = False
        self.consecutive_limit_days = 0
