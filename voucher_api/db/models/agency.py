from __future__ import annotations
from typing import Optional, List

from sqlalchemy import Boolean, String, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Agency(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "agencies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)

    # Contact
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    # Branding
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024))
    primary_color: Mapped[Optional[str]] = mapped_column(String(32))

    # Relationships
    users: Mapped[List["User"]] = relationship("User", back_populates="agency")

    vouchers: Mapped[List["Voucher"]] = relationship(
        "Voucher",
        back_populates="agency",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Agency id={self.id!r} slug={self.slug!r}>"
