MAX_PAGE_SIZE = 200


def positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def page_params(query_params, size_param, default_size=50):
    """``(page, size)`` from query params, size capped at ``MAX_PAGE_SIZE``."""
    page = positive_int(query_params.get("page"), 1)
    size = min(positive_int(query_params.get(size_param), default_size), MAX_PAGE_SIZE)
    return page, size
