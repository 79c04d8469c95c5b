from __future__ import annotations
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, UUIDPrimaryKeyMixin


class VoucherHotel(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "voucher_hotels"

    voucher_id: Mapped[str] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    hotel_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    meal_plan: Mapped[Optional[str]] = mapped_column(String(120))
    room_type: Mapped[Optional[str]] = mapped_column(String(120))
    check_in_time: Mapped[Optional[str]] = mapped_column(String(32))
    check_out_time: Mapped[Optional[str]] = mapped_column(String(32))

    voucher = relationship("Voucher", back_populates="hotel")
