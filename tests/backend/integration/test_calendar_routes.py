import datetime as dt

import pytest


pytestmark = pytest.mark.asyncio


async def test_gregorian_to_jalali(client):
    resp = await client.get("/api/v1/calendar/jalali", params={"date": "2024-03-20"})
    assert resp.status_code == 200
    body = resp.json()
    assert (body["year"], body["month"], body["day"]) == (1403, 1, 1)
    assert body["short"] == "1403/01/01"
    assert body["shortFa"] == "۱۴۰۳/۰۱/۰۱"
    assert body["monthKey"] == "1403/01"
    assert body["full"] == "1 فروردین 1403"
    assert body["monthName"] == "فروردین"
    assert body["weekday"] == "چهارشنبه"
    assert body["gridColumn"] == 4


async def test_jalali_to_gregorian(client):
    resp = await client.get("/api/v1/calendar/gregorian", params={"year": 1403, "month": 12, "day": 30})
    assert resp.status_code == 200
    assert resp.json()["gregorian"] == "2025-03-20"


async def test_jalali_to_gregorian_rolls_over_missing_leap_day(client):
    resp = await client.get("/api/v1/calendar/gregorian", params={"year": 1404, "month": 12, "day": 30})
    assert resp.status_code == 200
    assert resp.json()["short"] == "1405/01/01"


async def test_jalali_to_gregorian_validates_month(client):
    resp = await client.get("/api/v1/calendar/gregorian", params={"year": 1403, "month": 13, "day": 1})
    assert resp.status_code == 422


async def test_parse_short_date(client):
    resp = await client.get("/api/v1/calendar/parse", params={"value": "1403/06/01"})
    assert resp.json()["gregorian"] == "2024-08-22"

    fallback = await client.get("/api/v1/calendar/parse", params={"value": "not-a-date"})
    assert fallback.json()["gregorian"] == dt.date.today().isoformat()


@pytest.mark.parametrize("value", ["0/01/01", "99999/01/01", "1403/01/999999999"])
async def test_parse_out_of_range_resolves_to_today(client, value):
    resp = await client.get("/api/v1/calendar/parse", params={"value": value})
    assert resp.status_code == 200
    assert resp.json()["gregorian"] == dt.date.today().isoformat()


async def test_parse_persian_digits(client):
    resp = await client.get("/api/v1/calendar/parse", params={"value": "۱۴۰۳/۰۶/۰۱"})
    body = resp.json()
    assert body["gregorian"] == "2024-08-22"
    assert body["shortFa"] == "۱۴۰۳/۰۶/۰۱"
    assert body["monthKey"] == "1403/06"


async def test_today(client):
    resp = await client.get("/api/v1/calendar/today")
    assert resp.status_code == 200
    assert resp.json()["gregorian"] == dt.date.today().isoformat()


async def test_month_grid(client):
    resp = await client.get("/api/v1/calendar/month-grid", params={"year": 1403, "month": 6})
    assert resp.status_code == 200
    body = resp.json()
    assert body["monthName"] == "شهریور"
    assert body["daysInMonth"] == 31
    assert body["isLeapYear"] is True
    assert body["weekdays"][0] == "ش"
    assert len(body["weeks"]) == 6
    assert body["weeks"][0] == [None, None, None, None, None, 1, 2]
    assert body["previous"] == {"year": 1403, "month": 5}
    assert body["next"] == {"year": 1403, "month": 7}


async def test_month_grid_year_boundary(client):
    resp = await client.get("/api/v1/calendar/month-grid", params={"year": 1404, "month": 12})
    body = resp.json()
    assert body["daysInMonth"] == 29
    assert body["isLeapYear"] is False
    assert body["next"] == {"year": 1405, "month": 1}


async def test_healthz(client):
    resp = await client.get("/healthz")
    assert resp.json() == {"ok": True}
