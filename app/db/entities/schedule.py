from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.entities.base import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column("id", String, primary_key=True)
    identifier: Mapped[Any | None] = mapped_column("identifier", JSON, nullable=True)
    active: Mapped[bool] = mapped_column("active", Boolean, nullable=False, default=True)
    service_type: Mapped[Any] = mapped_column("service_type", JSON, nullable=False, default=list)
    actor: Mapped[Any] = mapped_column("actor", JSON, nullable=False, default=list)
    extension: Mapped[Any | None] = mapped_column("extension", JSON, nullable=True)
    publisher_url: Mapped[str | None] = mapped_column("publisher_url", String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, default=func.now()
    )
