from datetime import date, datetime, timedelta, timezone

from skillsync.utils.date_utils import epoch_millis, iso_week, trending_window


def test_december_31_can_belong_to_next_iso_year():
    assert iso_week(date(2024, 12, 31)) == (2025, 1)


def test_january_1_can_belong_to_previous_iso_year():
    assert iso_week(date(2021, 1, 1)) == (2020, 53)


def test_aware_datetimes_are_bucketed_by_utc_date():
    # 03:00 at +05:00 on Jan 2 is still Jan 1 in UTC
    local = datetime(2023, 1, 2, 3, 0, tzinfo=timezone(timedelta(hours=5)))
    assert iso_week(local) == (2022, 52)
    assert iso_week(local.date()) == (2023, 1)


def test_trending_window_spans_four_weeks():
    assert trending_window(date(2025, 3, 5)) == (2025, 7, 10)


def test_trending_window_is_clamped_at_week_one():
    assert trending_window(date(2025, 1, 8)) == (2025, 1, 2)


def test_epoch_millis():
    assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
