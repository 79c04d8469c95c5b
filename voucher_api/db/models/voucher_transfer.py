from __future__ import annotations
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, UUIDPrimaryKeyMixin


class VoucherTransfer(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "voucher_transfers"

    voucher_id: Mapped[str] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    receptive_name: Mapped[Optional[str]] = mapped_column(String(255))
    receptive_phone: Mapped[Optional[str]] = mapped_column(String(50))

    voucher = relationship("Voucher", back_populates="transfer")
