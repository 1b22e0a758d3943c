from datetime import date, datetime, timedelta, timezone

from dateutil.tz import gettz, UTC
import pytest

from sitemapper.dates import InvalidDateError, normalize_date, to_datetime


def test_timestamp_string():
    assert normalize_date('1609459200') == '2021-01-01T00:00:00+00:00'


def test_timestamp_number():
    assert normalize_date(1609459200) == '2021-01-01T00:00:00+00:00'
    assert normalize_date(1609459200.75) == '2021-01-01T00:00:00+00:00'


def test_timestamp_in_other_timezone():
    new_york = gettz('America/New_York')
    assert normalize_date('1609459200', new_york) == \
        '2020-12-31T19:00:00-05:00'


def test_freeform_date():
    assert normalize_date('January 1, 2021') == '2021-01-01T00:00:00+00:00'
    assert normalize_date('2021-01-01') == '2021-01-01T00:00:00+00:00'


def test_freeform_date_with_offset():
    assert normalize_date('2021-01-01T12:30:00Z') == \
        '2021-01-01T12:30:00+00:00'
    assert normalize_date('2021-01-01 12:30:00+02:00') == \
        '2021-01-01T12:30:00+02:00'


def test_naive_freeform_date_uses_timezone():
    berlin = gettz('Europe/Berlin')
    assert normalize_date('2021-07-01 08:00', berlin) == \
        '2021-07-01T08:00:00+02:00'


def test_datetime_and_date():
    aware = datetime(2021, 1, 1, 6, 0, 0, 123456, tzinfo=timezone.utc)
    assert normalize_date(aware) == '2021-01-01T06:00:00+00:00'
    assert normalize_date(datetime(2021, 1, 1, 6, 0)) == \
        '2021-01-01T06:00:00+00:00'
    assert normalize_date(date(2021, 1, 1)) == '2021-01-01T00:00:00+00:00'


def test_relative_keywords():
    today = datetime.now(UTC).date()
    assert normalize_date('Today') == f'{today.isoformat()}T00:00:00+00:00'
    yesterday = today - timedelta(days=1)
    assert normalize_date('yesterday') == \
        f'{yesterday.isoformat()}T00:00:00+00:00'
    tomorrow = today + timedelta(days=1)
    assert normalize_date('tomorrow').startswith(tomorrow.isoformat())


def test_relative_phrases():
    now = datetime.now(UTC)
    ago = to_datetime('3 days ago')
    assert abs(ago - (now - timedelta(days=3))) < timedelta(seconds=5)
    later = to_datetime('+2 hours')
    assert abs(later - (now + timedelta(hours=2))) < timedelta(seconds=5)
    assert abs(to_datetime('now') - now) < timedelta(seconds=5)


@pytest.mark.parametrize('value', ['not a date at all', '', True, None, [1]])
def test_invalid_date(value):
    with pytest.raises(InvalidDateError):
        normalize_date(value)


@pytest.mark.parametrize('value', ['²', '² days ago'])
def test_non_ascii_digits(value):
    with pytest.raises(InvalidDateError):
        normalize_date(value)
