from __future__ import annotations
"""Reusable validation helpers for request payloads.

Services receive plain mappings; these keep the 400 semantics consistent for
payloads that are not objects or carry fields a service does not accept.
"""
import re
from typing import Any, Dict, Iterable
from flask import request
from labtrack.errors import ValidationError

REGION_PATTERN = re.compile(r'^[a-z]{2,8}$')


def require_mapping(data: Any, what: str = 'request body') -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(description=f'{what} must be a JSON object')
    return data


def reject_unknown(data: Dict[str, Any], allowed: Iterable[str], message: str = 'unknown fields'):
    unknown = set(data) - set(allowed)
    if unknown:
        raise ValidationError(description=f'{message}: {", ".join(sorted(str(k) for k in unknown))}')


def json_body() -> Dict[str, Any]:
    """The request's JSON object; an empty body reads as {}."""
    data = request.json
    if data is None:
        return {}
    return require_mapping(data)


def normalize_region(raw: Any) -> str:
    """Lower-case region code, 2-8 ASCII letters; raises ValueError otherwise."""
    region = raw.strip().lower() if isinstance(raw, str) else ''
    if not REGION_PATTERN.match(region):
        raise ValueError('region must be 2-8 letters')
    return region


__all__ = ['require_mapping', 'reject_unknown', 'json_body', 'normalize_region']
