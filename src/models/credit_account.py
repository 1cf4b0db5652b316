from datetime import date, datetime

from sqlalchemy import JSON, TIMESTAMP, Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.models.base import Base


class CreditAccount(Base):
    __tablename__ = "credit_accounts"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    tier: Mapped[str] = mapped_column(String, nullable=False, default="core")
    # Units consumed today, keyed by action type value
    consumed: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    last_reset_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    premium_since: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    grace_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, default=func.current_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, default=func.current_timestamp(), onupdate=func.current_timestamp()
    )

    def __init__(self, user_id: str, tier: str, last_reset_date: date):
        self.user_id = user_id
        self.tier = tier
        self.last_reset_date = last_reset_date
        self.consumed = {}
        self.is_premium = False
        self.grace_used = False
