from __future__ import annotations
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, UUIDPrimaryKeyMixin


class VoucherStopover(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "voucher_stopovers"

    voucher_id: Mapped[str] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    location: Mapped[Optional[str]] = mapped_column(String(255))
    duration: Mapped[Optional[str]] = mapped_column(String(64))

    voucher = relationship("Voucher", back_populates="stopover")
