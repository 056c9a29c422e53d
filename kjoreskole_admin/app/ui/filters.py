from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

T = TypeVar("T")

Accessor = Callable[[Any], Any]

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "ja", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "nei", "off"}


# -- accessors ---------------------------------------------------------------


def field(path: str) -> Accessor:
    """Read a dotted path (``"bedrift.navn"``) from a dict record."""
    parts = tuple(path.split("."))

    def _get(record: Any) -> Any:
        value = record
        for part in parts:
            if not isinstance(value, Mapping):
                return None
            value = value.get(part)
        return value

    return _get


def count(path: str) -> Accessor:
    getter = field(path)

    def _count(record: Any) -> int:
        value = getter(record)
        return len(value) if isinstance(value, (list, tuple, set)) else 0

    return _count


def joined(*paths: str, sep: str = " ") -> Accessor:
    getters = [field(path) for path in paths]

    def _join(record: Any) -> str:
        return sep.join(str(value) for value in (getter(record) for getter in getters) if value not in (None, ""))

    return _join


def any_true(*paths: str) -> Accessor:
    getters = [field(path) for path in paths]
    return lambda record: any(bool(getter(record)) for getter in getters)


def ranked(path: str, order: Sequence[Any]) -> Accessor:
    """Position of the field value in ``order``; unknown values rank as missing."""
    getter = field(path)
    positions = {value: index for index, value in enumerate(order)}
    return lambda record: positions.get(getter(record))


# -- filter values -----------------------------------------------------------


@dataclass(frozen=True)
class Range:
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class Period:
    start: date | None = None
    end: date | None = None


def is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    if isinstance(value, Range):
        return value.min is None and value.max is None
    if isinstance(value, Period):
        return value.start is None and value.end is None
    return False


def clean_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in filters.items() if not is_unset(value)}


def parse_tri_state(raw: Any) -> bool | None:
    if isinstance(raw, bool) or raw is None:
        return raw
    normalized = str(raw).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError:
        return None


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# -- filter definitions -------------------------------------------------------


@dataclass(frozen=True)
class TextSearch:
    accessors: tuple[Accessor, ...]

    def matches(self, record: Any, value: Any) -> bool:
        term = str(value).strip().casefold()
        for accessor in self.accessors:
            candidate = accessor(record)
            if candidate is not None and term in str(candidate).casefold():
                return True
        return False


@dataclass(frozen=True)
class Exact:
    accessor: Accessor

    def matches(self, record: Any, value: Any) -> bool:
        candidate = self.accessor(record)
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            expected = _to_int(value)
            # "antall sjekkpunkter = abc" narrows nothing
            return True if expected is None else candidate == expected
        return candidate == value


@dataclass(frozen=True)
class AnyOf:
    accessor: Accessor

    def matches(self, record: Any, value: Any) -> bool:
        options = [value] if isinstance(value, str) else list(value)
        return self.accessor(record) in options


@dataclass(frozen=True)
class Contains:
    accessor: Accessor

    def matches(self, record: Any, value: Any) -> bool:
        candidate = self.accessor(record)
        if not isinstance(candidate, (list, tuple, set)):
            return False
        return value in candidate


@dataclass(frozen=True)
class TriState:
    predicate: Accessor

    def matches(self, record: Any, value: Any) -> bool:
        wanted = parse_tri_state(value)
        if wanted is None:
            return True
        return bool(self.predicate(record)) is wanted


@dataclass(frozen=True)
class NumericRange:
    accessor: Accessor

    def matches(self, record: Any, value: Range) -> bool:
        candidate = _to_float(self.accessor(record))
        if candidate is None:
            return False
        if value.min is not None and candidate < value.min:
            return False
        if value.max is not None and candidate > value.max:
            return False
        return True


@dataclass(frozen=True)
class DateRange:
    accessor: Accessor

    def matches(self, record: Any, value: Period) -> bool:
        candidate = to_date(self.accessor(record))
        if candidate is None:
            return False
        if value.start is not None and candidate < value.start:
            return False
        if value.end is not None and candidate > value.end:
            return False
        return True


FilterDef = TextSearch | Exact | AnyOf | Contains | TriState | NumericRange | DateRange


def apply_filters(items: Sequence[T], filters: Mapping[str, Any], schema: Mapping[str, FilterDef]) -> list[T]:
    active = [
        (schema[key], value)
        for key, value in filters.items()
        if key in schema and not is_unset(value)
    ]
    if not active:
        return list(items)
    return [item for item in items if all(definition.matches(item, value) for definition, value in active)]


def facet_options(items: Iterable[Any], accessor: Accessor) -> list[Any]:
    values: set[Any] = set()
    for item in items:
        value = accessor(item)
        if isinstance(value, (list, tuple, set)):
            values.update(entry for entry in value if not is_unset(entry))
        elif not is_unset(value):
            values.add(value)
    numbers = sorted(value for value in values if isinstance(value, (int, float)) and not isinstance(value, bool))
    others = sorted((value for value in values if value not in numbers), key=lambda value: collation_key(str(value)))
    return numbers + others


# æ, ø, å sort after z
_NORWEGIAN_COLLATION = str.maketrans({"æ": "{", "ø": "|", "å": "}", "ä": "{", "ö": "|"})


def collation_key(text: str) -> str:
    return text.casefold().translate(_NORWEGIAN_COLLATION)
