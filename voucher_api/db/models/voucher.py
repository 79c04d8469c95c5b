from __future__ import annotations
from typing import Optional, List

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from voucher_api.db.mixins import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Voucher(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vouchers"

    agency_id: Mapped[str] = mapped_column(
        ForeignKey("agencies.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # unique across all agencies, case preserved
    reservation_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    agency = relationship("Agency", back_populates="vouchers")

    flights: Mapped[List["VoucherFlight"]] = relationship(
        "VoucherFlight",
        back_populates="voucher",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VoucherFlight.segment_order",
    )

    hotel: Mapped[Optional["VoucherHotel"]] = relationship(
        "VoucherHotel",
        back_populates="voucher",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    transfer: Mapped[Optional["VoucherTransfer"]] = relationship(
        "VoucherTransfer",
        back_populates="voucher",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    stopover: Mapped[Optional["VoucherStopover"]] = relationship(
        "VoucherStopover",
        back_populates="voucher",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    tours: Mapped[List["VoucherTour"]] = relationship(
        "VoucherTour",
        back_populates="voucher",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VoucherTour.position",
    )

    travel_insurance: Mapped[Optional["TravelInsurance"]] = relationship(
        "TravelInsurance",
        back_populates="voucher",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Voucher id={self.id!r} code={self.reservation_code!r}>"
