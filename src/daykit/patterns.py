"""
Date Pattern Engine
===================
Formats and parses datetimes against SimpleDateFormat-style patterns
("yyyy-MM-dd HH:mm:ss.SSS", "dd.MM.yyyy", "dd MMMM yyyy", ...).

Patterns compile to immutable token tuples and are cached, so concurrent
callers never share mutable parser state.
"""

import calendar
import locale as _locale
import logging
import re
import threading
from datetime import datetime
from functools import lru_cache
from typing import NamedTuple, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class InvalidPattern(ValueError):
    """Raised when a pattern string cannot be compiled."""


class PatternMismatch(ValueError):
    """Raised when text does not match a pattern or names an invalid date."""


class Literal(NamedTuple):
    text: str


class Field(NamedTuple):
    letter: str
    count: int


Token = Union[Literal, Field]


class NameTables(NamedTuple):
    months: Tuple[str, ...]
    months_abbr: Tuple[str, ...]
    weekdays: Tuple[str, ...]
    weekdays_abbr: Tuple[str, ...]
    ampm: Tuple[str, str]


# ============================================================================
# PATTERN COMPILATION
# ============================================================================

SUPPORTED_LETTERS = frozenset("yMdHhmsSaE")

# Widest digit run accepted for a field that does not abut another number.
# Years have no limit there, so "02020" reads as 2020.
MAX_DIGITS = {"y": None, "M": 2, "d": 2, "H": 2, "h": 2, "m": 2, "s": 2, "S": 3}


def _is_numeric(token: Optional[Token]) -> bool:
    if not isinstance(token, Field):
        return False
    if token.letter == "M":
        return token.count <= 2
    return token.letter in MAX_DIGITS


@lru_cache(maxsize=128)
def compile_pattern(pattern: str) -> Tuple[Token, ...]:
    """
    Split a pattern into literal and field tokens

    Letters repeat to form a field ("yyyy" is one year field of width 4).
    Text inside single quotes is literal, and '' stands for one quote.

    Args:
        pattern: Pattern string such as "dd.MM.yyyy"

    Returns:
        Tuple of Literal and Field tokens

    Raises:
        InvalidPattern: On unknown pattern letters or an unterminated quote
    """
    tokens = []
    literal = []
    i = 0
    n = len(pattern)

    def flush():
        if literal:
            tokens.append(Literal("".join(literal)))
            literal.clear()

    while i < n:
        ch = pattern[i]

        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            i += 1
            while True:
                if i >= n:
                    raise InvalidPattern(f"Unterminated quote in pattern: {pattern!r}")
                if pattern[i] == "'":
                    if i + 1 < n and pattern[i + 1] == "'":
                        literal.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
            continue

        if ("a" <= ch <= "z") or ("A" <= ch <= "Z"):
            if ch not in SUPPORTED_LETTERS:
                raise InvalidPattern(f"Unsupported pattern letter {ch!r} in {pattern!r}")
            j = i
            while j < n and pattern[j] == ch:
                j += 1
            flush()
            tokens.append(Field(ch, j - i))
            i = j
            continue

        literal.append(ch)
        i += 1

    flush()
    return tuple(tokens)


# ============================================================================
# LOCALE NAME TABLES
# ============================================================================

_LOCALE_LOCK = threading.Lock()


def _read_name_tables() -> NameTables:
    """Read month/weekday names and AM/PM markers from the active LC_TIME."""
    return NameTables(
        months=tuple(calendar.month_name[1:]),
        months_abbr=tuple(calendar.month_abbr[1:]),
        weekdays=tuple(calendar.day_name),
        weekdays_abbr=tuple(calendar.day_abbr),
        ampm=(
            datetime(2000, 1, 1, 1).strftime("%p") or "AM",
            datetime(2000, 1, 1, 13).strftime("%p") or "PM",
        ),
    )


@lru_cache(maxsize=None)
def _default_tables(active_locale: str) -> NameTables:
    return _read_name_tables()


@lru_cache(maxsize=32)
def _locale_tables(locale_name: str) -> NameTables:
    # LC_TIME is process-wide, so switching it is serialized
    candidates = [locale_name, f"{locale_name}.UTF-8", _locale.normalize(locale_name)]
    with _LOCALE_LOCK:
        for candidate in dict.fromkeys(candidates):
            try:
                with calendar.different_locale(candidate):
                    return _read_name_tables()
            except _locale.Error:
                continue

    logger.warning("Locale %r is not available, using default date names", locale_name)
    return name_tables()


def name_tables(locale_name: Optional[str] = None) -> NameTables:
    """
    Return the month, weekday and AM/PM names for a locale

    Args:
        locale_name: Locale such as "de_DE". None means the process LC_TIME.
    """
    if locale_name:
        return _locale_tables(locale_name)
    # Wait out any locale switch in progress in another thread
    with _LOCALE_LOCK:
        return _default_tables(_locale.setlocale(_locale.LC_TIME, None))


# ============================================================================
# FORMATTING
# ============================================================================

def _format_field(field: Field, value: datetime, names: NameTables) -> str:
    letter, count = field

    if letter == "y":
        if count == 2:
            return f"{value.year % 100:02d}"
        return str(value.year).zfill(count)
    if letter == "M":
        if count >= 4:
            return names.months[value.month - 1]
        if count == 3:
            return names.months_abbr[value.month - 1]
        return str(value.month).zfill(count)
    if letter == "E":
        if count >= 4:
            return names.weekdays[value.weekday()]
        return names.weekdays_abbr[value.weekday()]
    if letter == "a":
        return names.ampm[value.hour >= 12]

    if letter == "d":
        number = value.day
    elif letter == "H":
        number = value.hour
    elif letter == "h":
        number = value.hour % 12 or 12
    elif letter == "m":
        number = value.minute
    elif letter == "s":
        number = value.second
    else:
        number = value.microsecond // 1000
    return str(number).zfill(count)


def format_datetime(pattern: str, value: datetime, locale: Optional[str] = None) -> str:
    """
    Render a datetime using a pattern

    Args:
        pattern: Pattern string such as "yyyy-MM-dd HH:mm:ss.SSS"
        value: The datetime to render
        locale: Locale for month/weekday names; None uses the process locale

    Returns:
        The formatted string
    """
    tokens = compile_pattern(pattern)
    names = name_tables(locale)

    parts = []
    for token in tokens:
        if isinstance(token, Literal):
            parts.append(token.text)
        else:
            parts.append(_format_field(token, value, names))
    return "".join(parts)


# ============================================================================
# PARSING
# ============================================================================

def _names_regex(*groups) -> str:
    alternatives = sorted({name for group in groups for name in group if name}, key=len, reverse=True)
    return "(?i:" + "|".join(re.escape(name) for name in alternatives) + ")"


@lru_cache(maxsize=128)
def _parser_regex(tokens: Tuple[Token, ...], names: NameTables) -> "re.Pattern":
    parts = []
    for index, token in enumerate(tokens):
        if isinstance(token, Literal):
            parts.append(re.escape(token.text))
            continue

        group = f"f{index}"
        letter, count = token
        if letter == "M" and count >= 3:
            body = _names_regex(names.months, names.months_abbr)
        elif letter == "E":
            body = _names_regex(names.weekdays, names.weekdays_abbr)
        elif letter == "a":
            body = _names_regex(names.ampm)
        else:
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            if _is_numeric(following):
                body = rf"[0-9]{{{count}}}"
            elif MAX_DIGITS[letter] is None:
                body = "[0-9]+"
            else:
                body = rf"[0-9]{{1,{max(count, MAX_DIGITS[letter])}}}"
        parts.append(f"(?P<{group}>{body})")

    return re.compile("".join(parts))


def _lookup(name: str, *tables) -> int:
    folded = name.casefold()
    for table in tables:
        for position, candidate in enumerate(table):
            if candidate and candidate.casefold() == folded:
                return position
    raise PatternMismatch(f"Unknown name: {name!r}")


def _expand_two_digit_year(year: int) -> int:
    # Window of 80 years back and 20 years forward from today
    now = datetime.now()
    start = now.year - 80
    century = start - start % 100
    candidate = century + year
    if candidate < start:
        candidate += 100
    return candidate


def parse_datetime(pattern: str, text: str, locale: Optional[str] = None) -> datetime:
    """
    Parse text against a pattern

    The whole text must match and every field must form a real calendar
    value. Missing fields default to 1970-01-01 00:00:00.000.

    Args:
        pattern: Pattern string such as "dd.MM.yyyy"
        text: The text to parse
        locale: Locale for month/weekday names; None uses the process locale

    Returns:
        A naive datetime

    Raises:
        InvalidPattern: If the pattern cannot be compiled
        PatternMismatch: If the text does not match or names an invalid date
    """
    tokens = compile_pattern(pattern)
    names = name_tables(locale)

    match = _parser_regex(tokens, names).fullmatch(text)
    if match is None:
        raise PatternMismatch(f"{text!r} does not match pattern {pattern!r}")

    year, month, day = 1970, 1, 1
    hour, minute, second, millis = 0, 0, 0, 0
    hour12 = None
    pm = None
    weekday = None

    for index, token in enumerate(tokens):
        if isinstance(token, Literal):
            continue
        raw = match.group(f"f{index}")
        letter, count = token

        if letter == "y":
            year = int(raw)
            if count == 2 and len(raw) == 2:
                year = _expand_two_digit_year(year)
        elif letter == "M":
            if count >= 3:
                month = _lookup(raw, names.months, names.months_abbr) + 1
            else:
                month = int(raw)
        elif letter == "d":
            day = int(raw)
        elif letter == "E":
            weekday = _lookup(raw, names.weekdays, names.weekdays_abbr)
        elif letter == "a":
            pm = _lookup(raw, names.ampm) == 1
        elif letter == "H":
            hour = int(raw)
            if hour > 23:
                raise PatternMismatch(f"Hour out of range in {text!r}")
        elif letter == "h":
            hour12 = int(raw)
            if not 1 <= hour12 <= 12:
                raise PatternMismatch(f"Hour out of range in {text!r}")
            hour12 %= 12
        elif letter == "m":
            minute = int(raw)
        elif letter == "s":
            second = int(raw)
        else:
            millis = int(raw)

    if hour12 is not None:
        hour = hour12 + (12 if pm else 0)

    try:
        result = datetime(year, month, day, hour, minute, second, millis * 1000)
    except (OverflowError, ValueError) as e:
        raise PatternMismatch(f"{text!r} is not a valid date: {e}") from e

    if weekday is not None and result.weekday() != weekday:
        raise PatternMismatch(f"Weekday does not match date in {text!r}")

    return result
