'''
Normalize the many ways a caller can express a date into the W3C datetime
format that sitemaps expect, e.g. ``2021-01-01T00:00:00+00:00``.
'''
from datetime import date, datetime
import logging
import re

import dateutil.parser
from dateutil.relativedelta import relativedelta
from dateutil.tz import UTC

from . import SitemapError


logger = logging.getLogger(__name__)
_RELATIVE_RE = re.compile(
    r'^([+-]?\d+)\s+(second|minute|hour|day|week|month|year)s?(\s+ago)?$',
    re.ASCII)


class InvalidDateError(SitemapError):
    ''' A date value could not be interpreted. '''


def _midnight(dt):
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _parse_relative(text, now):
    '''
    Resolve a relative date expression such as "today" or "3 days ago".

    :param str text: A lower-cased, stripped expression.
    :param datetime now: The reference time.
    :returns: The resolved time, or None if ``text`` is not relative.
    :rtype: datetime
    '''
    if text == 'now':
        return now
    if text in ('today', 'midnight'):
        return _midnight(now)
    if text == 'yesterday':
        return _midnight(now) - relativedelta(days=1)
    if text == 'tomorrow':
        return _midnight(now) + relativedelta(days=1)

    match = _RELATIVE_RE.match(text)
    if match is None:
        return None
    amount = int(match.group(1))
    if match.group(3):
        amount = -amount
    return now + relativedelta(**{match.group(2) + 's': amount})


def to_datetime(value, tz=UTC):
    '''
    Convert ``value`` to a timezone-aware datetime.

    :param value: A Unix timestamp (int, float, or string of digits), a
        ``datetime``, a ``date``, or a freeform date/time string.
    :param tzinfo tz: Timezone for timestamps, naive values, and relative
        expressions.
    :rtype: datetime
    :raises InvalidDateError: If the value cannot be interpreted.
    '''
    if isinstance(value, bool):
        raise InvalidDateError(f'Not a date: {value!r}')

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidDateError(f'Timestamp out of range: {value!r}') \
                from exc

    if not isinstance(value, str):
        raise InvalidDateError(f'Not a date: {value!r}')

    text = value.strip()
    if text.isascii() and text.isdigit():
        return to_datetime(int(text), tz)

    now = datetime.now(tz)
    relative = _parse_relative(text.lower(), now)
    if relative is not None:
        return relative

    try:
        parsed = dateutil.parser.parse(text,
            default=_midnight(now).replace(tzinfo=None))
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(f'Cannot parse date: {value!r}') from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def normalize_date(value, tz=UTC):
    '''
    Render ``value`` as an RFC 3339 timestamp with seconds precision.

    A string made entirely of decimal digits is a Unix timestamp. Any other
    string is parsed as a freeform date/time expression.

    >>> normalize_date('1609459200')
    '2021-01-01T00:00:00+00:00'

    :param value: See :func:`to_datetime`.
    :param tzinfo tz: Timezone used where ``value`` does not carry its own.
    :rtype: str
    :raises InvalidDateError: If the value cannot be interpreted.
    '''
    normalized = to_datetime(value, tz).isoformat(timespec='seconds')
    logger.debug('Normalized date %r to %s', value, normalized)
    return normalized
