from datetime import timedelta

from conftest import T0
from services.cache import CacheEntry
from services.freshness import Decision, FreshnessPolicy, parse_timestamp, state_change_times


def _entry(payload=None, fetched_at=T0) -> CacheEntry:
    return CacheEntry(key="place-a", payload=payload or {"status": "open"}, fetched_at=fetched_at)


def _iso(dt) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def test_missing_entry_refreshes() -> None:
    assert FreshnessPolicy().decide(None, T0) is Decision.REFRESH


def test_young_entry_is_fresh() -> None:
    policy = FreshnessPolicy()
    assert policy.decide(_entry(), T0 + timedelta(minutes=30)) is Decision.FRESH


def test_entry_at_or_past_ttl_refreshes() -> None:
    policy = FreshnessPolicy(ttl=timedelta(hours=1))
    assert policy.decide(_entry(), T0 + timedelta(hours=1)) is Decision.REFRESH
    assert policy.decide(_entry(), T0 + timedelta(hours=1, seconds=1)) is Decision.REFRESH
    assert policy.decide(_entry(), T0 + timedelta(minutes=59, seconds=59)) is Decision.FRESH


def test_close_time_inside_lead_window_refreshes() -> None:
    payload = {"currentOpeningHours": {"openNow": True, "nextCloseTime": _iso(T0 + timedelta(minutes=10))}}
    policy = FreshnessPolicy(close_lead=timedelta(minutes=15))
    assert policy.decide(_entry(payload), T0 + timedelta(minutes=9)) is Decision.REFRESH


def test_close_time_outside_lead_window_is_fresh() -> None:
    payload = {"currentOpeningHours": {"openNow": True, "nextCloseTime": _iso(T0 + timedelta(hours=3))}}
    policy = FreshnessPolicy(ttl=timedelta(hours=1), close_lead=timedelta(minutes=15))
    assert policy.decide(_entry(payload), T0 + timedelta(minutes=30)) is Decision.FRESH


def test_passed_open_time_refreshes() -> None:
    payload = {"currentOpeningHours": {"openNow": False, "nextOpenTime": _iso(T0 + timedelta(minutes=20))}}
    policy = FreshnessPolicy()
    assert policy.decide(_entry(payload), T0 + timedelta(minutes=19)) is Decision.FRESH
    assert policy.decide(_entry(payload), T0 + timedelta(minutes=20)) is Decision.REFRESH


def test_regular_opening_hours_used_as_fallback() -> None:
    payload = {"regularOpeningHours": {"nextCloseTime": _iso(T0 + timedelta(minutes=5))}}
    assert FreshnessPolicy().decide(_entry(payload), T0 + timedelta(minutes=1)) is Decision.REFRESH


def test_unparseable_boundary_is_ignored() -> None:
    payload = {"currentOpeningHours": {"nextCloseTime": "not a time"}}
    assert FreshnessPolicy().decide(_entry(payload), T0 + timedelta(minutes=1)) is Decision.FRESH


def test_state_change_times_reads_both_boundaries() -> None:
    payload = {
        "currentOpeningHours": {
            "nextOpenTime": "2024-06-02T08:00:00Z",
            "nextCloseTime": "2024-06-01T22:00:00Z",
        }
    }
    next_open, next_close = state_change_times(payload)
    assert next_open == T0.replace(day=2, hour=8)
    assert next_close == T0.replace(hour=22)


def test_parse_timestamp_assumes_utc_for_naive_values() -> None:
    assert parse_timestamp("2024-06-01T12:00:00") == T0
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
