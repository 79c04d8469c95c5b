"""
Seed a superadmin, a demo agency with its admin, and one complete demo voucher.

    SEED_SUPERADMIN_EMAIL=root@example.com SEED_SUPERADMIN_PASSWORD=secret123 \
        python scripts/seed_demo.py

Safe to re-run: existing rows (matched by email / slug / reservation code) are reused.
"""
import logging
import os

from voucher_api.db.mixins import Base
from voucher_api.db.session import SessionLocal, engine
from voucher_api.core.security import hash_password
from voucher_api.db.models import Agency, User, UserRole, Voucher
from voucher_api.schemas.voucher import VoucherCreate
from voucher_api.services.voucher_pipeline import build_voucher

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("seed_demo")

DEMO_AGENCY = {
    "name": "Demo Travel",
    "slug": "demo-travel",
    "phone": "11999999999",
    "email": "agency@demo-travel.test",
}

DEMO_VOUCHER = {
    "reservationCode": "ABC123",
    "clientName": "Demo Client",
    "flights": [
        {
            "direction": "OUTBOUND",
            "flightNumber": "G3 1234",
            "departureTime": "08:10",
            "arrivalTime": "10:20",
            "embarkAirport": "GRU",
            "disembarkAirport": "BSB",
            "connections": [
                {"flightNumber": "G3 1500", "departureTime": "11:35", "arrivalTime": "13:50", "disembarkAirport": "REC"},
            ],
        },
        {
            "direction": "RETURN",
            "flightNumber": "G3 4321",
            "departureTime": "18:30",
            "arrivalTime": "21:40",
            "embarkAirport": "REC",
            "disembarkAirport": "GRU",
        },
    ],
    "hotel": {
        "hotelName": "Demo Beach Hotel",
        "mealPlan": "Breakfast",
        "roomType": "Standard",
        "checkInTime": "14:00",
        "checkOutTime": "12:00",
    },
    "transfer": {"receptiveName": "Demo Receptive", "receptivePhone": "81988887777"},
    "stopover": {"location": "Brasilia", "duration": "1h15"},
    "tours": [{"name": "City Tour", "dateTime": "09:00", "meetingPoint": "Hotel lobby"}],
    "travelInsurance": {"providerName": "Demo Assist", "providerPhone": "0800 000 000"},
}


def get_or_create_user(db, *, email: str, name: str, password: str, role: UserRole, agency_id=None) -> User:
    email = email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing
    user = User(
        agency_id=agency_id,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.flush()
    return user


def main():
    Base.metadata.create_all(bind=engine)

    superadmin_email = os.getenv("SEED_SUPERADMIN_EMAIL", "superadmin@example.com")
    superadmin_password = os.getenv("SEED_SUPERADMIN_PASSWORD", "change-me")
    admin_password = os.getenv("SEED_ADMIN_PASSWORD", "change-me")

    db = SessionLocal()
    try:
        get_or_create_user(
            db,
            email=superadmin_email,
            name="Super Admin",
            password=superadmin_password,
            role=UserRole.SUPERADMIN,
        )

        agency = db.query(Agency).filter(Agency.slug == DEMO_AGENCY["slug"]).first()
        if not agency:
            agency = Agency(**DEMO_AGENCY)
            db.add(agency)
            db.flush()

        get_or_create_user(
            db,
            email=f"admin@{DEMO_AGENCY['slug']}.test",
            name="Demo Admin",
            password=admin_password,
            role=UserRole.ADMIN,
            agency_id=agency.id,
        )

        payload = VoucherCreate.model_validate(DEMO_VOUCHER)
        voucher = db.query(Voucher).filter(Voucher.reservation_code == payload.reservation_code).first()
        if not voucher:
            voucher = build_voucher(agency.id, payload)
            db.add(voucher)

        db.commit()
        logger.info("Seed complete. AGENCY_ID=%s RESERVATION=%s", agency.id, voucher.reservation_code)
    except Exception:
        db.rollback()
        logger.exception("Seed failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
