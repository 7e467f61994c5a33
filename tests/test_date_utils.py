from datetime import datetime, timedelta, timezone

import pytest
import pytz

from date_utils import EN_ES, DateResolver, TimeUnit, to_millis

from conftest import FIXED_NOW

NOW_MS = to_millis(FIXED_NOW)


@pytest.mark.parametrize("label, delta", [
    ("21 hours ago", timedelta(hours=21)),
    ("1 hour ago", timedelta(hours=1)),
    ("3 days ago", timedelta(days=3)),
    ("1 day ago", timedelta(days=1)),
    ("5 minutes ago", timedelta(minutes=5)),
    ("2 mins ago", timedelta(minutes=2)),
    ("40 seconds ago", timedelta(seconds=40)),
    ("3 horas ago", timedelta(hours=3)),
    ("2 días ago", timedelta(days=2)),
    ("21 Hours Ago", timedelta(hours=21)),
])
def test_relative_labels(en_resolver, label, delta):
    assert en_resolver.resolve(label) == NOW_MS - int(delta.total_seconds() * 1000)


def test_unknown_unit_falls_through_to_unknown(en_resolver):
    assert en_resolver.resolve("3 weeks ago") == 0


def test_non_numeric_amount_is_unknown(en_resolver):
    assert en_resolver.resolve("some hours ago") == 0


@pytest.mark.parametrize("label, day", [
    ("today", 21),
    ("Today", 21),
    ("yesterday", 20),
    ("ayer", 20),
])
def test_today_and_yesterday_resolve_to_midnight(en_resolver, label, day):
    resolved = en_resolver.resolve(label)
    as_dt = datetime.fromtimestamp(resolved / 1000, tz=pytz.utc)
    assert (as_dt.year, as_dt.month, as_dt.day) == (2020, 7, day)
    assert (as_dt.hour, as_dt.minute, as_dt.second, as_dt.microsecond) == (0, 0, 0, 0)


def test_midnight_uses_configured_timezone():
    moscow = pytz.timezone('Europe/Moscow')
    # 23:30 UTC on the 21st is already the 22nd in Moscow
    resolver = DateResolver(pattern='%d.%m.%Y', tz=moscow,
                            clock=lambda: datetime(2020, 7, 21, 23, 30, tzinfo=pytz.utc))
    local = datetime.fromtimestamp(resolver.resolve("today") / 1000, tz=moscow)
    assert (local.day, local.hour, local.minute) == (22, 0, 0)


def test_absolute_pattern(en_resolver):
    expected = to_millis(datetime(2020, 7, 21, tzinfo=pytz.utc))
    assert en_resolver.resolve("July 21, 2020") == expected


def test_russian_vocabulary(ru_resolver):
    assert ru_resolver.resolve("21.07.2020") == to_millis(datetime(2020, 7, 21, tzinfo=pytz.utc))
    assert ru_resolver.resolve("5 дней назад") == NOW_MS - 5 * 86400 * 1000
    assert ru_resolver.resolve("2 часа назад") == NOW_MS - 2 * 3600 * 1000
    midnight = datetime.fromtimestamp(ru_resolver.resolve("вчера") / 1000, tz=pytz.utc)
    assert (midnight.day, midnight.hour) == (20, 0)


@pytest.mark.parametrize("label", ["not a date at all", "", None, "32.13.2020", "ago"])
def test_garbage_resolves_to_zero(en_resolver, label):
    assert en_resolver.resolve(label) == 0


def test_default_clock_is_close_to_now():
    resolver = DateResolver(pattern='%B %d, %Y', vocabulary=EN_ES, tz=pytz.utc)
    expected = to_millis(datetime.now(pytz.utc) - timedelta(hours=1))
    assert abs(resolver.resolve("1 hour ago") - expected) < 5000


def test_plural_lookup():
    assert EN_ES.lookup_unit('hours') is TimeUnit.HOUR
    assert EN_ES.lookup_unit('hour') is TimeUnit.HOUR
    assert EN_ES.lookup_unit('weeks') is None


@pytest.mark.parametrize("label", ["1000000 days ago", "99999999999999 seconds ago"])
def test_out_of_range_relative_resolves_to_zero(en_resolver, label):
    assert en_resolver.resolve(label) == 0


def test_plain_tzinfo_without_localize():
    resolver = DateResolver(pattern='%B %d, %Y', tz=timezone.utc, clock=lambda: FIXED_NOW)
    assert resolver.resolve("today") == to_millis(FIXED_NOW.replace(hour=0, minute=0, second=0))
    assert resolver.resolve("July 21, 2020") == to_millis(datetime(2020, 7, 21, tzinfo=pytz.utc))
