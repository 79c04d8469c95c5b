from voucher_api.core.security import create_access_token, hash_password
from voucher_api.db.models import Agency, User, UserRole
from voucher_api.db.session import SessionLocal

DEFAULT_PASSWORD = "secret123"


def make_agency(name="Agency A", slug="agency-a", is_active=True, **extra) -> Agency:
    with SessionLocal() as db:
        agency = Agency(name=name, slug=slug, is_active=is_active, **extra)
        db.add(agency)
        db.commit()
        db.refresh(agency)
        return agency


def make_user(
    email="admin@a.test",
    role=UserRole.ADMIN,
    agency: Agency | None = None,
    password=DEFAULT_PASSWORD,
    name="Staff",
) -> User:
    with SessionLocal() as db:
        user = User(
            agency_id=agency.id if agency else None,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.agency_id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


def count_rows(model) -> int:
    with SessionLocal() as db:
        return db.query(model).count()


def voucher_payload(code="XYZ999", client="Jane Doe", **overrides) -> dict:
    payload = {
        "reservationCode": code,
        "clientName": client,
        "flights": [
            {
                "direction": "OUTBOUND",
                "flightNumber": "G3 1234",
                "departureTime": "08:10",
                "arrivalTime": "10:20",
                "embarkAirport": "GRU",
                "disembarkAirport": "REC",
            },
            {
                "direction": "RETURN",
                "flightNumber": "G3 4321",
                "departureTime": "18:30",
                "arrivalTime": "20:40",
                "embarkAirport": "REC",
                "disembarkAirport": "GRU",
            },
        ],
    }
    payload.update(overrides)
    return payload
