"""Accumulate search results page by page."""

import logging
from collections.abc import Callable, Sequence

from cats_jira.faults import TooManyResultsFault
from cats_jira.models import Issue

logger = logging.getLogger(__name__)

# Large requests time out on the server, so ask for the default page size and
# accumulate instead.
ISSUES_REQUEST_SIZE = 50

# Hard ceiling on accumulated results.
TOTAL_ISSUES_LIMIT = 10000


def accumulate(
    fetch_page: Callable[[int, int], Sequence[Issue]],
    page_size: int = ISSUES_REQUEST_SIZE,
    limit: int = TOTAL_ISSUES_LIMIT,
) -> list[Issue]:
    """Call fetch_page(start_at, max_results) until a short page comes back.

    Pages are requested one at a time and results keep server order. Raises
    TooManyResultsFault once more than limit issues have accumulated.
    """
    issues: list[Issue] = []
    while True:
        page = fetch_page(len(issues), page_size)
        logger.debug("Fetched %d issues at offset %d", len(page), len(issues))
        issues.extend(page)
        if len(page) < page_size:
            return issues
        if len(issues) > limit:
            raise TooManyResultsFault(f"Too many known issues: over {len(issues)}", count=len(issues))
