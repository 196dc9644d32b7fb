from pathlib import Path

from dental_booking.core.config import settings

API = "/api/v1/users"

USER = {
    "name": "Dr. Hale",
    "email": "Hale@Example.com",
    "password": "s3cret-pass",
    "role": "dentist",
    "overview": "General practice",
}


async def _register(client, files=None, **overrides):
    return await client.post(f"{API}/register", data={**USER, **overrides}, files=files)


async def _token(client) -> str:
    await _register(client)
    response = await client.post(f"{API}/login", json={"email": USER["email"], "password": USER["password"]})
    return response.json()["token"]


async def test_register_without_avatar_uses_default(client) -> None:
    response = await _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "hale@example.com"
    assert body["avatar"] == settings.default_avatar
    assert "hashed_password" not in body
    assert "password" not in body


async def test_register_stores_avatar(client) -> None:
    response = await _register(client, files={"avatar": ("Photo.PNG", b"\x89PNG fake", "image/png")})

    assert response.status_code == 201
    avatar = response.json()["avatar"]
    assert avatar.startswith("/uploads/")
    assert avatar.endswith(".png")
    assert (Path(settings.upload_dir) / avatar.rsplit("/", 1)[1]).read_bytes() == b"\x89PNG fake"


async def test_register_rejects_unsupported_avatar_type(client) -> None:
    response = await _register(client, files={"avatar": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400


async def test_register_requires_role(client) -> None:
    body = {k: v for k, v in USER.items() if k != "role"}

    response = await client.post(f"{API}/register", data=body)

    assert response.status_code == 400


async def test_register_duplicate_email_conflicts(client) -> None:
    await _register(client)

    response = await _register(client, email="hale@example.com")

    assert response.status_code == 409


async def test_login_with_wrong_password(client) -> None:
    await _register(client)

    response = await client.post(f"{API}/login", json={"email": USER["email"], "password": "nope"})

    assert response.status_code == 401


async def test_profile_requires_valid_token(client) -> None:
    token = await _token(client)

    ok = await client.get(f"{API}/profile", headers={"Authorization": f"Bearer {token}"})
    anonymous = await client.get(f"{API}/profile")
    forged = await client.get(f"{API}/profile", headers={"Authorization": "Bearer not-a-token"})

    assert ok.status_code == 200
    assert ok.json()["name"] == "Dr. Hale"
    assert anonymous.status_code == 401
    assert forged.status_code == 401


async def test_bookings_made_while_logged_in_are_listed_for_user(client) -> None:
    token = await _token(client)
    headers = {"Authorization": f"Bearer {token}"}
    me = (await client.get(f"{API}/profile", headers=headers)).json()
    booking = {
        "name": "Dr. Hale",
        "email": "clinic@example.com",
        "phone": "07700900123",
        "date": "2025-03-10",
        "time": "09:00",
    }
    created = await client.post("/api/v1/booking/booking", json=booking, headers=headers)

    listed = await client.get(f"{API}/{me['id']}/bookings", headers=headers)
    detail = await client.get(f"{API}/{me['id']}", headers=headers)
    everyone = await client.get(API, headers=headers)
    missing = await client.get(f"{API}/999", headers=headers)

    assert [b["id"] for b in listed.json()] == [created.json()["bookingId"]]
    assert detail.json()["email"] == "hale@example.com"
    assert [u["id"] for u in everyone.json()] == [me["id"]]
    assert missing.status_code == 404


async def test_register_rejects_malformed_email(client) -> None:
    response = await _register(client, email="not-an-email")

    assert response.status_code == 400
