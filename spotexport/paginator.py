"""
Cursor-based pagination over Spotify paging objects.

Every paginated collection shares the envelope ``{"items": [...], "next": url|null}``.
Pages are walked one at a time, and a failed page fetch aborts the walk.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from spotexport.errors import FetchError

logger = logging.getLogger(__name__)

Page = Dict[str, Any]


def iter_pages(first_page: Optional[Page], fetch_next: Callable[[Page], Optional[Page]],
               next_key: str = "next") -> Iterator[Page]:
    """
    Yield pages starting at ``first_page`` until one has no next cursor.

    Args:
        first_page: Already fetched first page, or None for an empty listing
        fetch_next: Callable fetching the page referenced by ``page[next_key]``
        next_key: Key holding the next-page cursor

    Raises:
        FetchError: If a page fetch fails or returns nothing while a cursor was set
    """
    page = first_page
    page_number = 0

    while page is not None:
        page_number += 1
        yield page

        next_ref = page.get(next_key)
        if not next_ref:
            logger.debug(f"Pagination finished after {page_number} page(s)")
            return

        logger.debug(f"Fetching page {page_number + 1}: {next_ref}")
        page = fetch_next(page)
        if page is None:
            raise FetchError(f"Empty response for page {page_number + 1}", url=next_ref)


def paginate(first_page: Optional[Page], fetch_next: Callable[[Page], Optional[Page]],
             items_key: str = "items", next_key: str = "next") -> List[Any]:
    """Accumulate the items of every page, in page order then in-page order."""
    items: List[Any] = []
    for page in iter_pages(first_page, fetch_next, next_key=next_key):
        items.extend(page.get(items_key) or [])
    return items
