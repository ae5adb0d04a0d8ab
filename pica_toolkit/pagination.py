"""Pagination Aggregator - drains page-based list endpoints."""

import logging
from typing import Any, Awaitable, Callable, List, Mapping, Union

from .types import Page

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[Union[Page, Mapping[str, Any]]]]

DEFAULT_PAGE_SIZE = 100


async def paginate_results(fetch_page: PageFetcher, limit: int = DEFAULT_PAGE_SIZE) -> List[Any]:
    """
    Fetch pages 1..N sequentially and concatenate their rows.

    The page count is taken from the ``pages`` field of each response.
    Any exception raised by ``fetch_page`` propagates; no partial results
    are returned.

    Args:
        fetch_page: Coroutine called with (page, limit)
        limit: Rows per page

    Returns:
        All rows in server order
    """
    page = 1
    total_pages = 0
    all_results: List[Any] = []

    while True:
        response = await fetch_page(page, limit)
        if not isinstance(response, Page):
            response = Page.model_validate(response)

        total_pages = response.pages
        all_results.extend(response.rows)
        page += 1

        if page > total_pages:
            break

    logger.debug(f"Paginated {len(all_results)} rows over {total_pages} pages")
    return all_results
