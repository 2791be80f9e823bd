from __future__ import annotations


def as_int(raw, default: int, name: str) -> int:
    """Coerce a query-string or environment value to int, raising ValueError with the field name."""
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f'{name} must be int')
