from __future__ import annotations

from datetime import date

SHIFT_KEY_DELIMITER = "|"


def _date_part(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def shift_key(shift_date: date | str, time_slot_code: str) -> str:
    """Join key shared by the resolver, the aggregator and the chip builder."""
    date_part = _date_part(shift_date)
    if SHIFT_KEY_DELIMITER in date_part or SHIFT_KEY_DELIMITER in time_slot_code:
        raise ValueError(f"Shift key parts cannot contain {SHIFT_KEY_DELIMITER!r}: {date_part!r}, {time_slot_code!r}")
    return f"{date_part}{SHIFT_KEY_DELIMITER}{time_slot_code}"


def parse_shift_key(key: str) -> tuple[str, str]:
    date_part, sep, code = key.partition(SHIFT_KEY_DELIMITER)
    if not sep or not date_part or not code or SHIFT_KEY_DELIMITER in code:
        raise ValueError(f"Malformed shift key: {key!r}")
    return date_part, code
