from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, String, TIMESTAMP, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.entities.base import Base


class PractitionerRole(Base):
    __tablename__ = "practitioner_roles"

    id: Mapped[str] = mapped_column("id", String, primary_key=True)
    identifier: Mapped[Any | None] = mapped_column("identifier", JSON, nullable=True)
    active: Mapped[bool] = mapped_column("active", Boolean, nullable=False, default=True)
    practitioner: Mapped[Any | None] = mapped_column("practitioner", JSON, nullable=True)
    organization: Mapped[Any | None] = mapped_column("organization", JSON, nullable=True)
    code: Mapped[Any] = mapped_column("code", JSON, nullable=False, default=list)
    specialty: Mapped[Any] = mapped_column("specialty", JSON, nullable=False, default=list)
    location: Mapped[Any] = mapped_column("location", JSON, nullable=False, default=list)
    telecom: Mapped[Any | None] = mapped_column("telecom", JSON, nullable=True)
    npi: Mapped[str | None] = mapped_column("npi", String, nullable=True, index=True)
    insurance_accepted: Mapped[Any | None] = mapped_column("insurance_accepted", JSON, nullable=True)
    languages_spoken: Mapped[Any | None] = mapped_column("languages_spoken", JSON, nullable=True)
    education: Mapped[Any | None] = mapped_column("education", JSON, nullable=True)
    board_certifications: Mapped[Any | None] = mapped_column("board_certifications", JSON, nullable=True)
    hospital_affiliations: Mapped[Any | None] = mapped_column("hospital_affiliations", JSON, nullable=True)
    enrichment_data: Mapped[Any | None] = mapped_column("enrichment_data", JSON, nullable=True)
    publisher_url: Mapped[str | None] = mapped_column("publisher_url", String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, default=func.now()
    )
