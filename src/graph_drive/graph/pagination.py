"""Follows @odata.nextLink continuation links to reassemble paged listings."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from graph_drive.errors import NotFoundError, RemoteError
from graph_drive.graph.models import ERROR_ITEM_NOT_FOUND, PageEnvelope, error_code, error_message

if TYPE_CHECKING:
    from graph_drive.graph.client import GraphClient

logger = logging.getLogger(__name__)


def iter_pages(client: GraphClient, target: str) -> Iterator[PageEnvelope]:
    """Yield each page of a listing, requesting page N+1 only after page N arrived.

    Args:
        client: Authenticated GraphClient.
        target: Path of the first page (e.g. ``/drives/{id}/items/root/children``).

    Yields:
        PageEnvelope objects in server order.

    Raises:
        NotFoundError: If the listed item does not exist.
        RemoteError: If the server answers with any other error envelope.
        MalformedResponseError: If a page has no ``value`` collection.
    """
    next_target: str | None = target
    page_count = 0
    while next_target is not None:
        body = client.get(next_target)
        code = error_code(body)
        if code == ERROR_ITEM_NOT_FOUND:
            raise NotFoundError(f"Cannot list {target}: {error_message(body)}")
        if code is not None:
            raise RemoteError(code, error_message(body))

        page = PageEnvelope.from_raw(body)
        page_count += 1
        logger.debug(
            "[iter_pages] received page; target:%s;page:%d;item_count:%d",
            target,
            page_count,
            len(page.items),
        )
        yield page
        next_target = page.next_link


def iter_items(client: GraphClient, target: str) -> Iterator[dict[str, Any]]:
    """Yield every raw item of a listing across all of its pages."""
    for page in iter_pages(client, target):
        yield from page.items


def collect_all(client: GraphClient, target: str) -> list[dict[str, Any]]:
    """Return the ordered concatenation of every page of a listing.

    No upper bound on page count or item count is assumed.
    """
    return list(iter_items(client, target))
