"""
Page/limit pagination
=====================

Offset pagination with a page number instead of the cursor pagination used
for infinite feeds: clients of the video and comment lists jump to
arbitrary pages, and the response carries the totals needed for that.

Response shape:
{
    "docs": [...],
    "totalDocs": 42,
    "limit": 10,
    "page": 2,
    "totalPages": 5,
    "pagingCounter": 11,     # 1-based index of the first doc on this page
    "hasPrevPage": true,
    "hasNextPage": true,
    "prevPage": 1,
    "nextPage": 3
}
"""
from django.core.paginator import Paginator

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(raw, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def parse_page_params(query_params) -> tuple[int, int]:
    """Read ?page=&limit= falling back to 1 and 10 on missing or bad input."""
    page = _positive_int(query_params.get('page'), DEFAULT_PAGE)
    limit = min(_positive_int(query_params.get('limit'), DEFAULT_LIMIT), MAX_LIMIT)
    return page, limit


def paginate(queryset, page: int, limit: int, serialize) -> dict:
    """
    Slice one page out of an ordered queryset.

    `serialize` turns the list of rows on this page into JSON-ready docs.
    Pages past the end produce empty docs instead of an error.

    Queries: 2 (COUNT + the page itself)
    """
    paginator = Paginator(queryset, limit, allow_empty_first_page=True)
    total_docs = paginator.count
    total_pages = paginator.num_pages if total_docs else 0

    offset = (page - 1) * limit
    rows = list(queryset[offset:offset + limit]) if offset < total_docs else []

    has_prev = page > 1
    has_next = page < total_pages
    return {
        'docs': serialize(rows),
        'totalDocs': total_docs,
        'limit': limit,
        'page': page,
        'totalPages': total_pages,
        'pagingCounter': offset + 1,
        'hasPrevPage': has_prev,
        'hasNextPage': has_next,
        'prevPage': page - 1 if has_prev else None,
        'nextPage': page + 1 if has_next else None,
    }
