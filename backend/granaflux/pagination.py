from __future__ import annotations

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def page_params(args) -> tuple[int, int]:
    """Read `page`/`limit` from query args, clamped to sane bounds."""
    page = args.get("page", default=1, type=int) or 1
    limit = args.get("limit", default=DEFAULT_LIMIT, type=int) or DEFAULT_LIMIT
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    return page, limit


def paginate(query, *, page: int, limit: int) -> tuple[list, dict]:
    """
    Apply offset/limit to a SQLAlchemy query.

    Returns (rows, pagination) where pagination is {page, limit, total, pages}.
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    pages = (total + limit - 1) // limit if total > 0 else 0
    return rows, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
    }
