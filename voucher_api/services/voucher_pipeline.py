# voucher_api/services/voucher_pipeline.py
"""
Voucher creation pipeline and voucher reads.

validate -> expand flights (primary leg + connections) -> persist in one commit
-> serialize with flights ordered OUTBOUND then RETURN, each by segment.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Type, TypeVar

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from voucher_api.core.errors import is_unique_violation
from voucher_api.db.models.agency import Agency
from voucher_api.db.models.travel_insurance import TravelInsurance
from voucher_api.db.models.voucher import Voucher
from voucher_api.db.models.voucher_flight import FlightDirection, VoucherFlight
from voucher_api.db.models.voucher_hotel import VoucherHotel
from voucher_api.db.models.voucher_stopover import VoucherStopover
from voucher_api.db.models.voucher_tour import VoucherTour
from voucher_api.db.models.voucher_transfer import VoucherTransfer
from voucher_api.schemas.voucher import FlightIn, VoucherCreate, VoucherOut

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=VoucherOut)

DIRECTION_ORDER = {FlightDirection.OUTBOUND: 0, FlightDirection.RETURN: 1}


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status.HTTP_400_BAD_REQUEST, message)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _direction_of(raw: Optional[str]) -> Optional[FlightDirection]:
    try:
        return FlightDirection((raw or "").strip().upper())
    except ValueError:
        return None


# ---------------------------
# Validation
# ---------------------------

def validate_voucher_payload(agency_id: Optional[str], payload: VoucherCreate) -> None:
    """Business checks, in order. First failure wins (400)."""
    if not agency_id:
        raise _bad_request("Your user is not linked to an agency. Contact support.")
    if not payload.reservation_code or not payload.reservation_code.strip():
        raise _bad_request("reservationCode is required")
    if not payload.client_name or not payload.client_name.strip():
        raise _bad_request("clientName is required")
    if not payload.flights:
        raise _bad_request("flights is required")

    directions = [_direction_of(f.direction) for f in payload.flights]
    if any(d is None for d in directions):
        raise _bad_request("Each flight direction must be OUTBOUND or RETURN")
    if FlightDirection.OUTBOUND not in directions or FlightDirection.RETURN not in directions:
        raise _bad_request("Include flights with direction OUTBOUND and RETURN")


# ---------------------------
# Flight expansion / ordering
# ---------------------------

def expand_flights(flights: Sequence[FlightIn]) -> List[VoucherFlight]:
    """
    Flatten each descriptor and its connections into segment rows.

    The primary leg of the first descriptor of a direction gets segment 0; every
    following segment of that direction (connections, further descriptors) gets
    the next integer. A connection embarks where the previous segment disembarked.
    """
    next_order = {FlightDirection.OUTBOUND: 0, FlightDirection.RETURN: 0}
    rows: List[VoucherFlight] = []

    for descriptor in flights:
        direction = _direction_of(descriptor.direction)
        if direction is None:
            raise _bad_request("Each flight direction must be OUTBOUND or RETURN")

        previous = VoucherFlight(
            direction=direction,
            segment_order=next_order[direction],
            flight_number=_clean(descriptor.flight_number),
            departure_time=_clean(descriptor.departure_time),
            arrival_time=_clean(descriptor.arrival_time),
            embark_airport=_clean(descriptor.embark_airport),
            disembark_airport=_clean(descriptor.disembark_airport),
            flight_date=descriptor.flight_date,
        )
        rows.append(previous)
        next_order[direction] += 1

        for connection in descriptor.connections:
            segment = VoucherFlight(
                direction=direction,
                segment_order=next_order[direction],
                flight_number=_clean(connection.flight_number),
                departure_time=_clean(connection.departure_time),
                arrival_time=_clean(connection.arrival_time),
                embark_airport=previous.disembark_airport,
                disembark_airport=_clean(connection.disembark_airport),
                flight_date=connection.flight_date,
            )
            rows.append(segment)
            next_order[direction] += 1
            previous = segment

    return rows


def sort_flights(flights: Iterable) -> list:
    """OUTBOUND segments first, then RETURN; each group by segment order."""
    return sorted(
        flights,
        key=lambda f: (DIRECTION_ORDER.get(f.direction, 99), f.segment_order),
    )


def serialize_voucher(voucher: Voucher, schema: Type[S] = VoucherOut) -> S:
    out = schema.model_validate(voucher)
    out.flights = sort_flights(out.flights)
    return out


# ---------------------------
# Create
# ---------------------------

def build_voucher(agency_id: str, payload: VoucherCreate) -> Voucher:
    voucher = Voucher(
        agency_id=agency_id,
        reservation_code=payload.reservation_code.strip(),
        client_name=payload.client_name.strip(),
    )
    voucher.flights = expand_flights(payload.flights or [])

    if payload.hotel is not None:
        h = payload.hotel
        voucher.hotel = VoucherHotel(
            hotel_name=_clean(h.hotel_name) or "",
            meal_plan=_clean(h.meal_plan),
            room_type=_clean(h.room_type),
            check_in_time=_clean(h.check_in_time),
            check_out_time=_clean(h.check_out_time),
        )
    if payload.transfer is not None:
        voucher.transfer = VoucherTransfer(
            receptive_name=_clean(payload.transfer.receptive_name),
            receptive_phone=_clean(payload.transfer.receptive_phone),
        )
    if payload.stopover is not None:
        voucher.stopover = VoucherStopover(
            location=_clean(payload.stopover.location),
            duration=_clean(payload.stopover.duration),
        )
    if payload.tours:
        voucher.tours = [
            VoucherTour(
                position=i,
                name=_clean(t.name) or "",
                date_time=_clean(t.date_time),
                meeting_point=_clean(t.meeting_point),
            )
            for i, t in enumerate(payload.tours)
        ]
    if payload.travel_insurance is not None:
        voucher.travel_insurance = TravelInsurance(
            provider_name=_clean(payload.travel_insurance.provider_name),
            provider_phone=_clean(payload.travel_insurance.provider_phone),
        )
    return voucher


def create_voucher(db: Session, agency_id: Optional[str], payload: VoucherCreate) -> Voucher:
    validate_voucher_payload(agency_id, payload)
    voucher = build_voucher(agency_id, payload)

    # voucher + every child row go out in a single commit
    db.add(voucher)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        if is_unique_violation(err):
            logger.info("Duplicate reservationCode %r (agency %s)", voucher.reservation_code, agency_id)
            raise HTTPException(status.HTTP_409_CONFLICT, "reservationCode already exists")
        raise

    db.refresh(voucher)
    logger.info(
        "Voucher %s created for agency %s (%d flight segments)",
        voucher.reservation_code, agency_id, len(voucher.flights),
    )
    return voucher


# ---------------------------
# Reads
# ---------------------------

def list_agency_vouchers(db: Session, agency_id: str) -> List[Voucher]:
    stmt = (
        select(Voucher)
        .where(Voucher.agency_id == agency_id)
        .order_by(Voucher.created_at.desc(), Voucher.id)
    )
    return list(db.scalars(stmt).all())


def get_agency_voucher(db: Session, agency_id: str, voucher_id: str) -> Voucher:
    voucher = db.scalars(
        select(Voucher).where(Voucher.id == voucher_id, Voucher.agency_id == agency_id)
    ).first()
    if not voucher:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Voucher not found")
    return voucher


def find_public_voucher(db: Session, reservation_code: str) -> Voucher:
    """
    Case-insensitive lookup for travelers. A voucher of an inactive agency is
    reported exactly like a missing one.
    """
    code = (reservation_code or "").strip()
    if not code:
        raise _bad_request("Invalid reservationCode")

    stmt = (
        select(Voucher)
        .join(Voucher.agency)
        .where(func.lower(Voucher.reservation_code) == code.lower())
        .options(selectinload(Voucher.agency))
        .order_by(Voucher.created_at, Voucher.id)
    )
    voucher = db.scalars(stmt).first()
    if not voucher or not voucher.agency or not voucher.agency.is_active:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Voucher not found")
    return voucher
