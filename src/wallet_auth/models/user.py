"""SQLAlchemy model for account identities and their pending nonce."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from wallet_auth.db.session import Base


class User(Base):
    """Account identity keyed by its canonical lowercase hex address."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(Text, primary_key=True)
    # Cleared once the nonce has been used to authenticate.
    nonce: Mapped[str | None] = mapped_column(Text, nullable=True)
    nonce_issued_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
