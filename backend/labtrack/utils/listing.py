from __future__ import annotations
from typing import Any, Callable, Dict
from flask import request
from sqlalchemy.orm import Query
from labtrack.config.pagination import normalize_pagination
from labtrack.errors import ValidationError


def paginate(q: Query, serialize: Callable[[Any], Dict[str, Any]]) -> Dict[str, Any]:
    """Apply the request's limit/offset to q and wrap the serialized page in the list envelope."""
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        raise ValidationError(description=str(e))
    total = q.count()
    rows = [serialize(obj) for obj in q.offset(offset).limit(limit)]
    return {
        'data': rows,
        'pagination': {'total': total, 'limit': limit, 'offset': offset, 'returned': len(rows)},
    }
