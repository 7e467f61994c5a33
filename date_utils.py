"""
Date Resolver - turns chapter release labels into epoch milliseconds

Handles relative labels ("21 hours ago", "3 horas ago", "5 дней назад"),
"yesterday"/"today" style words and one absolute strptime pattern per site.
A label that matches nothing resolves to 0 (unknown); nothing here raises.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import pytz

import config

logger = logging.getLogger(__name__)


class TimeUnit(Enum):
    DAY = timedelta(days=1)
    HOUR = timedelta(hours=1)
    MINUTE = timedelta(minutes=1)
    SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class DateVocabulary:
    """Locale words the resolver recognizes. All entries are lowercase."""
    relative_suffixes: Tuple[str, ...]
    units: Dict[str, TimeUnit]
    yesterday: Tuple[str, ...]
    today: Tuple[str, ...]
    plural_suffixes: Tuple[str, ...] = ('s',)

    def lookup_unit(self, word: str) -> Optional[TimeUnit]:
        unit = self.units.get(word)
        if unit is not None:
            return unit
        for suffix in self.plural_suffixes:
            if word.endswith(suffix):
                unit = self.units.get(word[:-len(suffix)])
                if unit is not None:
                    return unit
        return None


# English and Spanish, as mixed on Madara sites ("21 horas ago")
EN_ES = DateVocabulary(
    relative_suffixes=('ago',),
    units={
        'day': TimeUnit.DAY, 'día': TimeUnit.DAY, 'dia': TimeUnit.DAY,
        'hour': TimeUnit.HOUR, 'hora': TimeUnit.HOUR,
        'min': TimeUnit.MINUTE, 'minute': TimeUnit.MINUTE, 'minuto': TimeUnit.MINUTE,
        'second': TimeUnit.SECOND, 'segundo': TimeUnit.SECOND,
    },
    yesterday=('yesterday', 'ayer'),
    today=('today', 'hoy'),
)

# Russian inflects the unit instead of suffixing it, so every form is listed
RU = DateVocabulary(
    relative_suffixes=('назад',),
    units={
        'день': TimeUnit.DAY, 'дня': TimeUnit.DAY, 'дней': TimeUnit.DAY,
        'час': TimeUnit.HOUR, 'часа': TimeUnit.HOUR, 'часов': TimeUnit.HOUR,
        'минуту': TimeUnit.MINUTE, 'минуты': TimeUnit.MINUTE, 'минут': TimeUnit.MINUTE,
        'секунду': TimeUnit.SECOND, 'секунды': TimeUnit.SECOND, 'секунд': TimeUnit.SECOND,
    },
    yesterday=('вчера',),
    today=('сегодня',),
    plural_suffixes=(),
)


def to_millis(dt: datetime) -> int:
    return calendar.timegm(dt.utctimetuple()) * 1000 + dt.microsecond // 1000


@dataclass
class DateResolver:
    """
    Resolve one site's date labels.

    `pattern` is a strptime pattern for absolute dates, interpreted in `tz`.
    `clock` returns the current aware datetime and exists so tests can pin it.
    """
    pattern: str
    vocabulary: DateVocabulary = EN_ES
    tz: tzinfo = field(default_factory=lambda: pytz.timezone(config.TIMEZONE))
    clock: Optional[Callable[[], datetime]] = None

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.now(self.tz)

    def _localize(self, naive: datetime) -> datetime:
        # pytz zones need localize() to pick the right offset; plain tzinfo does not
        localize = getattr(self.tz, 'localize', None)
        if localize is not None:
            return localize(naive)
        return naive.replace(tzinfo=self.tz)

    def _midnight(self, days_back: int) -> int:
        day = self.now().astimezone(self.tz).date() - timedelta(days=days_back)
        return to_millis(self._localize(datetime(day.year, day.month, day.day)))

    def _relative(self, text: str) -> Optional[int]:
        parts = text.split()
        if len(parts) != 3 or parts[2] not in self.vocabulary.relative_suffixes:
            return None
        try:
            amount = int(parts[0])
        except ValueError:
            return None
        unit = self.vocabulary.lookup_unit(parts[1])
        if unit is None:
            return None
        try:
            return to_millis(self.now() - amount * unit.value)
        except (OverflowError, ValueError):
            logger.debug(f"Relative date {text!r} is out of range")
            return None

    def _absolute(self, text: str) -> int:
        try:
            parsed = datetime.strptime(text, self.pattern)
        except ValueError:
            logger.debug(f"Unparseable date {text!r} for pattern {self.pattern!r}")
            return 0
        return to_millis(self._localize(parsed))

    def resolve(self, raw: Optional[str]) -> int:
        if not raw:
            return 0
        text = raw.strip()
        lowered = text.lower()

        if lowered.endswith(self.vocabulary.relative_suffixes):
            resolved = self._relative(lowered)
            if resolved is not None:
                return resolved

        if lowered.startswith(self.vocabulary.yesterday):
            return self._midnight(1)
        if lowered.startswith(self.vocabulary.today):
            return self._midnight(0)

        return self._absolute(text)
