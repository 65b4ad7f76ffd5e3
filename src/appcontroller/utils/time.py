import re
from datetime import timedelta
from typing import Union

_UNITS = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
}
_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def parse_duration(value: Union[str, int, float]) -> timedelta:
    """
    Parses a duration like '30s', '1h30m' or '250ms' into a timedelta.

    Bare numbers are taken as seconds.
    """
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = value.strip()
    if not text:
        raise ValueError("Duration must not be empty.")
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return timedelta(seconds=float(text))

    parts = _PART.findall(text)
    if not parts or "".join(number + unit for number, unit in parts) != text:
        raise ValueError(f"Invalid duration format: {value}")

    kwargs: dict = {}
    for number, unit in parts:
        field = _UNITS[unit]
        kwargs[field] = kwargs.get(field, 0) + float(number)
    return timedelta(**kwargs)


def duration_seconds(value: Union[str, int, float]) -> float:
    return parse_duration(value).total_seconds()
