import base64
import struct
import zlib
from io import BytesIO

import pytest
import requests
from PIL import Image

from voucher_api.core.config import settings
from voucher_api.db.models import Agency, User, UserRole
from voucher_api.db.session import SessionLocal
from voucher_api.services import logo_upload
from tests.helpers import auth_headers, count_rows, make_agency, make_user

AGENCY_ROUTES = [
    ("GET", "/admin/agencies", None),
    ("POST", "/admin/agencies", {"name": "X", "slug": "x"}),
    ("PATCH", "/admin/agencies/{id}/status", {"isActive": False}),
    ("PATCH", "/admin/agencies/{id}/branding", {"primaryColor": "#000000"}),
    ("POST", "/admin/agencies/{id}/logo", {"contentType": "image/png", "base64": "AAAA"}),
    ("POST", "/admin/agencies/{id}/users", {"name": "N", "email": "n@x.test", "password": "secret123"}),
]


def _png_b64(size=(8, 8)) -> str:
    buf = BytesIO()
    Image.new("RGB", size, (0, 120, 200)).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def _huge_png_header(width=20000, height=20000) -> bytes:
    """Tiny PNG whose IHDR claims a huge canvas."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )


class FakeResponse:
    def __init__(self, status_code=200, text="{}"):
        self.status_code = status_code
        self.text = text


@pytest.fixture
def storage_calls(monkeypatch):
    calls = []

    def fake_post(url, data=None, headers=None, timeout=None):
        calls.append({"url": url, "data": data, "headers": headers})
        return FakeResponse(200)

    monkeypatch.setattr(logo_upload.requests, "post", fake_post)
    return calls


@pytest.fixture
def storage_configured(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_URL", "https://storage.example.test")
    monkeypatch.setattr(settings, "STORAGE_SERVICE_KEY", "service-key")


# ---------- access control ----------

@pytest.mark.asyncio
@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.AGENCY])
@pytest.mark.parametrize("method, path, body", AGENCY_ROUTES)
async def test_agency_routes_reject_non_superadmin(client, agency_a, role, method, path, body):
    user = make_user(email=f"{role.value.lower()}@a.test", role=role, agency=agency_a)
    r = await client.request(method, path.format(id=agency_a.id), json=body, headers=auth_headers(user))
    assert r.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("method, path, body", AGENCY_ROUTES)
async def test_agency_routes_require_token(client, agency_a, method, path, body):
    r = await client.request(method, path.format(id=agency_a.id), json=body)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_401(client):
    r = await client.get("/admin/agencies", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    r = await client.get("/admin/agencies", headers={"Authorization": "Basic Zm9vOmJhcg=="})
    assert r.status_code == 401


# ---------- me ----------

@pytest.mark.asyncio
async def test_me_returns_user_and_agency(client, admin_a, agency_a):
    r = await client.get("/admin/me", headers=auth_headers(admin_a))
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["id"] == admin_a.id
    assert body["agency"]["slug"] == "agency-a"


@pytest.mark.asyncio
async def test_me_for_superadmin_has_no_agency(client, superadmin):
    r = await client.get("/admin/me", headers=auth_headers(superadmin))
    assert r.status_code == 200
    assert r.json()["agency"] is None


# ---------- agencies ----------

@pytest.mark.asyncio
async def test_create_and_list_agencies(client, superadmin):
    headers = auth_headers(superadmin)
    r = await client.post(
        "/admin/agencies",
        json={"name": " Sun Trips ", "slug": "  Sun-Trips ", "email": "hi@sun.test"},
        headers=headers,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Sun Trips"
    assert body["slug"] == "sun-trips"
    assert body["isActive"] is True

    r = await client.get("/admin/agencies", headers=headers)
    assert r.status_code == 200
    assert [a["slug"] for a in r.json()] == ["sun-trips"]


@pytest.mark.asyncio
async def test_duplicate_slug_is_conflict(client, superadmin, agency_a):
    r = await client.post(
        "/admin/agencies", json={"name": "Other", "slug": "AGENCY-A"}, headers=auth_headers(superadmin)
    )
    assert r.status_code == 409
    assert count_rows(Agency) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"slug": "x"},
        {"name": "X"},
        {"name": "X", "slug": "bad slug!"},
        {"name": "  ", "slug": "x"},
        {"name": "X", "slug": "a" * 121},
        {"name": "X", "slug": "ok", "phone": "9" * 51},
    ],
)
async def test_create_agency_validation(client, superadmin, body):
    r = await client.post("/admin/agencies", json=body, headers=auth_headers(superadmin))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_status(client, superadmin, agency_a):
    headers = auth_headers(superadmin)
    r = await client.patch(f"/admin/agencies/{agency_a.id}/status", json={"isActive": False}, headers=headers)
    assert r.status_code == 200
    assert r.json()["isActive"] is False

    r = await client.patch(f"/admin/agencies/{agency_a.id}/status", json={"isActive": "no"}, headers=headers)
    assert r.status_code == 400

    r = await client.patch("/admin/agencies/missing/status", json={"isActive": True}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_branding_fields_independently(client, superadmin, agency_a):
    headers = auth_headers(superadmin)
    url = f"/admin/agencies/{agency_a.id}/branding"

    r = await client.patch(url, json={"logoUrl": "https://cdn.test/a.png", "primaryColor": "#112233"}, headers=headers)
    assert r.status_code == 200

    r = await client.patch(url, json={"primaryColor": "#445566"}, headers=headers)
    assert r.json()["logoUrl"] == "https://cdn.test/a.png"
    assert r.json()["primaryColor"] == "#445566"

    r = await client.patch(url, json={"logoUrl": None}, headers=headers)
    assert r.json()["logoUrl"] is None
    assert r.json()["primaryColor"] == "#445566"


@pytest.mark.asyncio
async def test_branding_rejects_over_long_color(client, superadmin, agency_a):
    r = await client.patch(
        f"/admin/agencies/{agency_a.id}/branding",
        json={"primaryColor": "#" + "f" * 40},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 400
    assert r.json()["detail"].startswith("primaryColor")


# ---------- logo ----------

@pytest.mark.asyncio
async def test_logo_upload_stores_and_sets_url(client, superadmin, agency_a, storage_configured, storage_calls):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"fileName": "brand.png", "contentType": "image/png", "base64": _png_b64()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 200
    assert len(storage_calls) == 1
    call = storage_calls[0]
    assert call["url"] == (
        f"https://storage.example.test/storage/v1/object/agency-logos/agencies/{agency_a.id}/logo.png"
    )
    assert call["headers"]["x-upsert"] == "true"
    assert call["headers"]["content-type"] == "image/png"
    assert r.json()["logoUrl"].startswith(
        f"https://storage.example.test/storage/v1/object/public/agency-logos/agencies/{agency_a.id}/logo.png?v="
    )


@pytest.mark.asyncio
async def test_oversized_logo_rejected_before_upload(client, superadmin, agency_a, storage_configured, storage_calls):
    big = base64.b64encode(b"\x89PNG" + b"0" * (7 * 1024 * 1024)).decode()
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": big},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 400
    assert storage_calls == []


@pytest.mark.asyncio
async def test_disallowed_logo_type_rejected_before_upload(client, superadmin, agency_a, storage_configured, storage_calls):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/gif", "base64": _png_b64()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 400
    assert storage_calls == []


@pytest.mark.asyncio
async def test_corrupt_image_rejected_before_upload(client, superadmin, agency_a, storage_configured, storage_calls):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": base64.b64encode(b"definitely not a png").decode()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 400
    assert storage_calls == []


@pytest.mark.asyncio
async def test_svg_logo_accepted(client, superadmin, agency_a, storage_configured, storage_calls):
    svg = b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"></svg>'
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/svg+xml", "base64": base64.b64encode(svg).decode()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 200
    assert storage_calls[0]["url"].endswith("/logo.svg")


@pytest.mark.asyncio
async def test_decompression_bomb_logo_rejected_before_upload(client, superadmin, agency_a, storage_configured, storage_calls):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": base64.b64encode(_huge_png_header()).decode()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Unsupported or corrupted image"
    assert storage_calls == []


@pytest.mark.asyncio
async def test_svg_logo_with_long_prolog_accepted(client, superadmin, agency_a, storage_configured, storage_calls):
    svg = (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        + b"<!-- " + b"x" * 8000 + b" -->\n"
        + b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"></svg>'
    )
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/svg+xml", "base64": base64.b64encode(svg).decode()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 200
    assert len(storage_calls) == 1


@pytest.mark.asyncio
async def test_logo_upload_unconfigured_storage_is_503(client, superadmin, agency_a, storage_calls):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": _png_b64()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 503
    assert storage_calls == []


@pytest.mark.asyncio
async def test_logo_upstream_failure_is_502(client, superadmin, agency_a, storage_configured, monkeypatch):
    monkeypatch.setattr(logo_upload.requests, "post", lambda *a, **kw: FakeResponse(500, "boom"))
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": _png_b64()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 502

    with SessionLocal() as db:
        assert db.get(Agency, agency_a.id).logo_url is None


@pytest.mark.asyncio
async def test_logo_upstream_unreachable_is_502(client, superadmin, agency_a, storage_configured, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(logo_upload.requests, "post", boom)
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/logo",
        json={"contentType": "image/png", "base64": _png_b64()},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 502


# ---------- users ----------

@pytest.mark.asyncio
async def test_create_agency_user_defaults_to_admin(client, superadmin, agency_a):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/users",
        json={"name": "Ana", "email": "Ana@Agency-A.test", "password": "secret123"},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["role"] == "ADMIN"
    assert body["email"] == "ana@agency-a.test"
    assert body["agencyId"] == agency_a.id

    login = await client.post("/auth/login", json={"email": "ana@agency-a.test", "password": "secret123"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_create_agency_user_duplicate_email(client, superadmin, agency_a, admin_a):
    r = await client.post(
        f"/admin/agencies/{agency_a.id}/users",
        json={"name": "Dup", "email": "ADMIN@a.test", "password": "secret123"},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 409
    assert count_rows(User) == 2  # admin_a + superadmin


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"name": "A", "email": "a@x.test", "password": "12345"},
        {"name": "A", "email": "not-an-email", "password": "secret123"},
        {"email": "a@x.test", "password": "secret123"},
        {"name": "A", "email": "a@x.test", "password": "secret123", "role": "OWNER"},
    ],
)
async def test_create_agency_user_validation(client, superadmin, agency_a, body):
    r = await client.post(f"/admin/agencies/{agency_a.id}/users", json=body, headers=auth_headers(superadmin))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_create_user_for_unknown_agency(client, superadmin):
    r = await client.post(
        "/admin/agencies/nope/users",
        json={"name": "A", "email": "a@x.test", "password": "secret123"},
        headers=auth_headers(superadmin),
    )
    assert r.status_code == 404
