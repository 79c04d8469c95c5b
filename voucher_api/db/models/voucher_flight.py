from __future__ import annotations
import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, UUIDPrimaryKeyMixin


class FlightDirection(str, enum.Enum):
    OUTBOUND = "OUTBOUND"
    RETURN = "RETURN"


class VoucherFlight(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "voucher_flights"

    voucher_id: Mapped[str] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), index=True, nullable=False
    )

    direction: Mapped[FlightDirection] = mapped_column(
        Enum(FlightDirection, name="flight_direction"), nullable=False
    )
    # 0 = direct/primary leg, 1.. = connections
    segment_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    flight_number: Mapped[Optional[str]] = mapped_column(String(32))
    departure_time: Mapped[Optional[str]] = mapped_column(String(32))
    arrival_time: Mapped[Optional[str]] = mapped_column(String(32))
    embark_airport: Mapped[Optional[str]] = mapped_column(String(120))
    disembark_airport: Mapped[Optional[str]] = mapped_column(String(120))
    flight_date: Mapped[Optional[date]] = mapped_column(Date)

    voucher = relationship("Voucher", back_populates="flights")
