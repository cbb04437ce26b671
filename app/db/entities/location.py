from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String, Text, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.entities.base import Base


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[str] = mapped_column("id", String, primary_key=True)
    name: Mapped[str | None] = mapped_column("name", Text, nullable=True)
    telecom: Mapped[Any] = mapped_column("telecom", JSON, nullable=False, default=list)
    address: Mapped[Any | None] = mapped_column("address", JSON, nullable=True)
    identifier: Mapped[Any | None] = mapped_column("identifier", JSON, nullable=True)
    description: Mapped[str | None] = mapped_column("description", Text, nullable=True)
    position: Mapped[Any | None] = mapped_column("position", JSON, nullable=True)
    publisher_url: Mapped[str | None] = mapped_column("publisher_url", String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, default=func.now()
    )
