from datetime import date

from barbersmart.models import Appointment, BlockedDate


def url(shop, path):
    return f"/barbershops/{shop.barbershop.id}/recurrence{path}"


def test_count_options(client, shop):
    response = client.get(url(shop, "/count-options"), params={"rule": "biweekly"})
    assert response.status_code == 200
    options = response.json()
    assert options[0] == {"value": 2, "label": "2 times (2 weeks)"}


def test_preview_marks_each_date(client, db, shop):
    db.add(
        Appointment(
            barbershop_id=shop.barbershop.id,
            staff_id=shop.staff.id,
            date=date(2025, 1, 13),
            time="10:00",
            duration=30,
            status="scheduled",
        )
    )
    db.add(BlockedDate(barbershop_id=shop.barbershop.id, blocked_date=date(2025, 1, 20)))
    db.commit()

    response = client.post(
        url(shop, "/preview"),
        json={
            "start_date": "2025-01-06",
            "time": "10:00",
            "recurrence": {"rule": "weekly", "count": 4},
            "duration": 30,
            "staff_id": shop.staff.id,
            "service_price": 45.0,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "Weekly, 4 times, starting 06/01/2025"
    assert [(d["date"], d["available"]) for d in body["dates"]] == [
        ("2025-01-06", True),
        ("2025-01-13", False),
        ("2025-01-20", False),
        ("2025-01-27", True),
    ]
    assert body["dates"][1]["reason"] == "Time slot already booked"
    assert body["dates"][2]["reason"] == "Date is blocked for bookings"
    assert body["available_count"] == 2
    assert body["unavailable_count"] == 2
    assert body["total_price"] == 90.0


def test_preview_more_dates_than_one_batch(client, shop):
    response = client.post(
        url(shop, "/preview"),
        json={"start_date": "2025-01-06", "time": "09:00", "recurrence": {"rule": "weekly", "count": 12}},
    )
    body = response.json()
    assert len(body["dates"]) == 12
    assert body["available_count"] == 12
    assert body["total_price"] is None


def test_preview_custom_rule_requires_interval(client, shop):
    response = client.post(
        url(shop, "/preview"),
        json={"start_date": "2025-01-06", "time": "09:00", "recurrence": {"rule": "custom", "count": 3}},
    )
    assert response.status_code == 422


def test_preview_rejects_malformed_time(client, shop):
    response = client.post(
        url(shop, "/preview"),
        json={"start_date": "2025-01-06", "time": "9h", "recurrence": {"rule": "weekly", "count": 3}},
    )
    assert response.status_code == 422


def test_preview_summary_follows_end_date(client, shop):
    response = client.post(
        url(shop, "/preview"),
        json={
            "start_date": "2025-01-06",
            "time": "09:00",
            "recurrence": {"rule": "weekly", "count": 2, "end_date": "2025-01-27"},
        },
    )
    body = response.json()
    assert len(body["dates"]) == 4
    assert body["summary"] == "Weekly, 4 times, starting 06/01/2025"
