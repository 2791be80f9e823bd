from labtrack.config import as_int

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def normalize_pagination(limit_raw, offset_raw):
    limit = as_int(limit_raw, DEFAULT_LIMIT, 'limit')
    offset = as_int(offset_raw, 0, 'offset')
    return max(1, min(limit, MAX_LIMIT)), max(0, offset)
