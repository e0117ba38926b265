"""Tests for the availability engine."""

from datetime import timedelta

import pytest

from court_booking.exceptions import InvalidProposal
from court_booking.models import (
    Locations,
    Recurrence,
    RecurringSeriesSpec,
    TimePeriod,
    TimeProposal,
)
from court_booking.services.availability import (
    check_availability,
    check_recurring_availability,
)
from tests.mocks.models import (
    BADMINTON,
    BOTH_COURTS,
    MOCK_FUTURE_1,
    NOW,
    TABLE_TENNIS,
    at,
    make_reservation,
)
from tests.mocks.services import MockReservationStore


def _proposal(start, end, locations=BADMINTON, excluded=None) -> TimeProposal:
    return TimeProposal(
        start_time=start,
        end_time=end,
        locations=locations,
        excluded_reservation_id=excluded,
    )


async def _check(store, *proposals):
    async with store.unit_of_work() as repo:
        return await check_availability(repo, list(proposals))


# MOCK_FUTURE_1 occupies badminton on 2021-05-08 from 10:00 to 12:00.


class TestOverlap:
    @pytest.mark.parametrize(
        "start, end",
        [
            (at(8, 9), at(8, 11)),     # overlaps the start
            (at(8, 11), at(8, 13)),    # overlaps the end
            (at(8, 10, 30), at(8, 11)),  # inside
            (at(8, 9), at(8, 13)),     # around
            (at(8, 10), at(8, 12)),    # identical
        ],
    )
    async def test_overlapping_interval_conflicts(self, store, start, end):
        [result] = await _check(store, _proposal(start, end))
        assert result.is_available is False

    async def test_ending_exactly_at_start_is_free(self, store):
        [result] = await _check(store, _proposal(at(8, 8), at(8, 10)))
        assert result.is_available is True

    async def test_starting_exactly_at_end_is_free(self, store):
        [result] = await _check(store, _proposal(at(8, 12), at(8, 14)))
        assert result.is_available is True


class TestLocations:
    async def test_disjoint_courts_never_conflict(self, store):
        [result] = await _check(store, _proposal(at(8, 10), at(8, 12), TABLE_TENNIS))
        assert result.is_available is True

    async def test_one_shared_court_is_a_conflict(self, store):
        [result] = await _check(store, _proposal(at(8, 10), at(8, 12), BOTH_COURTS))
        assert result.is_available is False

    async def test_stored_booking_on_both_courts_blocks_either(self):
        both = make_reservation("Both", at(9, 10), locations=BOTH_COURTS)
        store = MockReservationStore([both])
        results = await _check(
            store,
            _proposal(at(9, 10), at(9, 11), BADMINTON),
            _proposal(at(9, 10), at(9, 11), TABLE_TENNIS),
        )
        assert [r.is_available for r in results] == [False, False]


class TestFiltering:
    async def test_inactive_reservations_are_ignored(self):
        cancelled = make_reservation("Cancelled", at(8, 10), is_active=False)
        store = MockReservationStore([cancelled])
        [result] = await _check(store, _proposal(at(8, 10), at(8, 12)))
        assert result.is_available is True

    async def test_excluded_reservation_is_ignored(self, store):
        [result] = await _check(
            store, _proposal(at(8, 10), at(8, 12), excluded=MOCK_FUTURE_1.id)
        )
        assert result.is_available is True


class TestBatch:
    async def test_results_follow_input_order(self, store):
        results = await _check(
            store,
            _proposal(at(8, 12), at(8, 13)),
            _proposal(at(8, 11), at(8, 13)),
            _proposal(at(9, 10), at(9, 12)),
        )
        assert [r.is_available for r in results] == [True, False, True]
        assert [r.start_time for r in results] == [at(8, 12), at(8, 11), at(9, 10)]

    async def test_one_batch_per_call(self, store):
        await _check(store, _proposal(at(8, 12), at(8, 13)), _proposal(at(9, 12), at(9, 13)))
        assert len(store.count_batches) == 1
        assert len(store.count_batches[0]) == 2

    async def test_proposals_are_not_checked_against_each_other(self, empty_store):
        results = await _check(
            empty_store,
            _proposal(at(8, 10), at(8, 12)),
            _proposal(at(8, 10), at(8, 12)),
        )
        assert all(r.is_available for r in results)

    async def test_empty_input_skips_the_store(self, store):
        assert await _check(store) == []
        assert store.count_batches == []


class TestInvariants:
    async def test_start_not_before_end_is_rejected(self, store):
        with pytest.raises(InvalidProposal):
            await _check(store, _proposal(at(8, 12), at(8, 12)))
        assert store.count_batches == []

    async def test_no_location_is_rejected(self, store):
        with pytest.raises(InvalidProposal):
            await _check(store, _proposal(at(8, 10), at(8, 12), Locations()))
        assert store.count_batches == []


class TestRecurringAvailability:
    def _spec(self, **overrides) -> RecurringSeriesSpec:
        fields = dict(
            start_time=at(4, 12),
            end_time=at(4, 13),
            locations=BADMINTON,
            recurrence=Recurrence.WEEKLY,
            time_period=TimePeriod.CURRENT_YEAR,
        )
        fields.update(overrides)
        return RecurringSeriesSpec(**fields)

    async def test_reference_case_on_empty_store(self, empty_store):
        async with empty_store.unit_of_work() as repo:
            result = await check_recurring_availability(repo, self._spec(), now=NOW)

        assert len(result.available_times) == 35
        assert result.unavailable_times == []
        gaps = {
            b - a for a, b in zip(result.available_times, result.available_times[1:])
        }
        assert gaps == {timedelta(days=7)}
        assert all(t.hour == 12 and t.minute == 0 for t in result.available_times)

    async def test_partitions_preserving_order(self):
        taken = [
            make_reservation("Taken A", at(18, 12, 30), duration=timedelta(hours=1)),
            make_reservation("Taken B", at(1, 11, month=6), duration=timedelta(hours=2)),
        ]
        store = MockReservationStore(taken)
        async with store.unit_of_work() as repo:
            result = await check_recurring_availability(repo, self._spec(), now=NOW)

        assert result.unavailable_times == [at(18, 12), at(1, 12, month=6)]
        assert len(result.available_times) == 33
        assert result.available_times == sorted(result.available_times)

    async def test_single_batch_for_whole_series(self, empty_store):
        async with empty_store.unit_of_work() as repo:
            await check_recurring_availability(repo, self._spec(), now=NOW)
        assert len(empty_store.count_batches) == 1
        batch = empty_store.count_batches[0]
        assert len(batch) == 35
        assert all(p.end_time - p.start_time == timedelta(hours=1) for p in batch)
        assert all(p.excluded_reservation_id is None for p in batch)

    async def test_included_and_excluded_dates(self, empty_store):
        spec = self._spec(included_dates=[at(6, 12)], excluded_dates=[at(4, 12)])
        async with empty_store.unit_of_work() as repo:
            result = await check_recurring_availability(repo, spec, now=NOW)
        assert result.available_times[0] == at(11, 12)
        assert result.available_times[-1] == at(6, 12)
        assert len(result.available_times) == 35
