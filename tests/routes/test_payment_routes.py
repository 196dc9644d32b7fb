API = "/api/v1"

BOOKING = {
    "name": "Dr. Hale",
    "patientName": "Sam Patient",
    "email": "clinic@example.com",
    "phone": "07700900123",
    "address": "1 High Street",
    "date": "2025-03-10",
    "time": "10:00:00",
}


async def _create_booking(client) -> int:
    response = await client.post(f"{API}/booking/booking", json=BOOKING)
    return response.json()["bookingId"]


async def test_create_payment_returns_client_secret(client, gateway) -> None:
    booking_id = await _create_booking(client)

    response = await client.post(
        f"{API}/payment/createPayment", json={"bookingId": booking_id, "amount": 45.5}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["paymentIntentId"].startswith("pi_test_")
    assert body["clientSecret"] == f"{body['paymentIntentId']}_secret"
    assert gateway.created == [(4550, "gbp", booking_id)]


async def test_create_payment_requires_amount(client) -> None:
    booking_id = await _create_booking(client)

    response = await client.post(f"{API}/payment/createPayment", json={"bookingId": booking_id})

    assert response.status_code == 400


async def test_create_payment_for_unknown_booking(client) -> None:
    response = await client.post(f"{API}/payment/createPayment", json={"bookingId": 321, "amount": 10})

    assert response.status_code == 404


async def test_confirm_payment_completes_booking_and_notifies(client, gateway, mailer) -> None:
    booking_id = await _create_booking(client)
    gateway.succeed("pi_ok", booking_id)

    response = await client.post(
        f"{API}/payment/confirmPayment", json={"bookingId": booking_id, "paymentId": "pi_ok"}
    )

    assert response.status_code == 200
    assert response.json()["paymentStatus"] == "Completed"
    detail = (await client.get(f"{API}/booking/{booking_id}")).json()
    assert detail["payment_id"] == "pi_ok"
    assert sorted(to for to, _ in mailer.sent) == ["clinic@example.com", "ops@dnh.dental"]


async def test_confirm_payment_twice_keeps_three_blocked_dates(client, gateway, mailer) -> None:
    booking_id = await _create_booking(client)
    gateway.succeed("pi_ok", booking_id)
    body = {"bookingId": booking_id, "paymentId": "pi_ok"}

    first = await client.post(f"{API}/payment/confirmPayment", json=body)
    second = await client.post(f"{API}/payment/confirmPayment", json=body)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["message"] == "Payment already confirmed"
    assert len((await client.get(f"{API}/booking/block")).json()) == 3
    assert len(mailer.sent) == 2


async def test_confirm_payment_requiring_action_is_rejected(client, gateway, mailer) -> None:
    booking_id = await _create_booking(client)
    gateway.statuses["pi_3ds"] = "requires_action"

    response = await client.post(
        f"{API}/payment/confirmPayment", json={"bookingId": booking_id, "paymentId": "pi_3ds"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "PaymentNotComplete"
    assert (await client.get(f"{API}/booking/{booking_id}")).json()["payment_status"] == "Pending"
    assert (await client.get(f"{API}/booking/block")).json() == []
    assert mailer.sent == []


async def test_confirm_payment_unknown_booking(client, gateway) -> None:
    gateway.succeed("pi_ok", 999)

    response = await client.post(f"{API}/payment/confirmPayment", json={"bookingId": 999, "paymentId": "pi_ok"})

    assert response.status_code == 404


async def test_confirm_payment_requires_payment_id(client) -> None:
    response = await client.post(f"{API}/payment/confirmPayment", json={"bookingId": 1})

    assert response.status_code == 400


async def test_confirm_payment_cannot_reuse_another_bookings_intent(client, gateway) -> None:
    first = await _create_booking(client)
    second = (await client.post(f"{API}/booking/booking", json={**BOOKING, "date": "2025-03-20"})).json()["bookingId"]
    intent = (await client.post(f"{API}/payment/createPayment", json={"bookingId": first, "amount": 45})).json()
    gateway.statuses[intent["paymentIntentId"]] = "succeeded"

    own = await client.post(
        f"{API}/payment/confirmPayment", json={"bookingId": first, "paymentId": intent["paymentIntentId"]}
    )
    replay = await client.post(
        f"{API}/payment/confirmPayment", json={"bookingId": second, "paymentId": intent["paymentIntentId"]}
    )

    assert own.status_code == 200
    assert replay.status_code == 400
    assert replay.json()["code"] == "PaymentNotComplete"
    assert (await client.get(f"{API}/booking/{second}")).json()["payment_status"] == "Pending"
    assert {b["booking_id"] for b in (await client.get(f"{API}/booking/block")).json()} == {first}
