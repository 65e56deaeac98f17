from datetime import date

from apps.bookings.domain.availability import compute_unavailability, get_availability
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.tests.factories import pool, villa


def test_empty_calendar():
    snapshot = get_availability([])

    assert snapshot.to_dict() == {
        "poolUnavailableDates": [],
        "villaUnavailableDates": [],
        "villaStartDates": [],
        "villaEndDates": [],
        "pendingDates": [],
        "approvedDates": [],
    }


def test_villa_checkout_day_stays_free():
    snapshot = compute_unavailability([villa(date(2024, 6, 1), date(2024, 6, 4))])

    expected = {date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)}
    assert snapshot.villa_unavailable == expected
    assert snapshot.pool_unavailable == expected
    assert snapshot.villa_start_dates == {date(2024, 6, 1)}
    assert snapshot.villa_end_dates == {date(2024, 6, 4)}
    assert date(2024, 6, 4) not in snapshot.pool_unavailable
    assert date(2024, 6, 2) in snapshot.villa_unavailable


def test_pool_days_only_block_the_pool():
    snapshot = compute_unavailability([pool(date(2024, 7, 10))])

    assert snapshot.pool_unavailable == {date(2024, 7, 10)}
    assert snapshot.villa_unavailable == frozenset()
    assert snapshot.villa_start_dates == frozenset()


def test_rejected_bookings_are_ignored():
    approved = villa(date(2024, 6, 1), date(2024, 6, 4))
    before = compute_unavailability([approved])
    assert date(2024, 6, 2) in before.villa_unavailable

    approved.change_status(BookingStatus.REJECTED, "guest cancelled")
    after = compute_unavailability([approved])

    assert after.villa_unavailable == frozenset()
    assert after.pool_unavailable == frozenset()


def test_status_buckets_and_sorted_output():
    snapshot = get_availability([
        pool(date(2024, 6, 9), status=BookingStatus.PENDING),
        villa(date(2024, 6, 1), date(2024, 6, 3)),
    ])

    data = snapshot.to_dict()
    assert data["poolUnavailableDates"] == ["2024-06-01", "2024-06-02", "2024-06-09"]
    assert data["pendingDates"] == ["2024-06-09"]
    assert data["approvedDates"] == ["2024-06-01", "2024-06-02"]
