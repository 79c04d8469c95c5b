from __future__ import annotations
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, UUIDPrimaryKeyMixin


class VoucherTour(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "voucher_tours"

    voucher_id: Mapped[str] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_time: Mapped[Optional[str]] = mapped_column(String(64))
    meeting_point: Mapped[Optional[str]] = mapped_column(String(255))

    voucher = relationship("Voucher", back_populates="tours")
