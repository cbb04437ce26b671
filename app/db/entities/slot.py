from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.entities.base import Base


class Slot(Base):
    __tablename__ = "slots"

    id: Mapped[str] = mapped_column("id", String, primary_key=True)
    schedule: Mapped[Any] = mapped_column("schedule", JSON, nullable=False)
    status: Mapped[str] = mapped_column("status", String, nullable=False)
    start: Mapped[datetime] = mapped_column("start", TIMESTAMP(timezone=True), nullable=False, index=True)
    end: Mapped[datetime] = mapped_column("end", TIMESTAMP(timezone=True), nullable=False)
    extension: Mapped[Any | None] = mapped_column("extension", JSON, nullable=True)
    appointment_type: Mapped[str | None] = mapped_column("appointment_type", String, nullable=True)
    is_virtual: Mapped[bool] = mapped_column("is_virtual", Boolean, nullable=False, default=False)
    publisher_url: Mapped[str | None] = mapped_column("publisher_url", String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, default=func.now()
    )
