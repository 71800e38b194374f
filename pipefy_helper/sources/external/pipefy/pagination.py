import logging
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
)

from pipefy_helper.exceptions.pipefy_exceptions import PipefyRequestError
from pipefy_helper.models.filters import (
    AnomalyKind,
    Page,
    PaginatedResult,
    PaginationAnomaly,
)
from pipefy_helper.sources.client.graphql.response import GraphQLResponse
from pipefy_helper.utils.logger import create_logger

FetchPage = Callable[[Optional[str]], Awaitable[Page]]
RequestPage = Callable[[Optional[str]], Awaitable[GraphQLResponse]]


class Paginator:
    """Walks a cursor-paginated Pipefy connection page by page.

    Pages are requested strictly one after another; the cursor of page N is
    only known once page N has arrived. Edges are yielded in server order and
    never de-duplicated. A node id seen twice is reported as an anomaly.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or create_logger("paginator")

    @staticmethod
    def page_from_connection(connection: Optional[Dict[str, Any]], operation: str = "connection") -> Page:
        """Build a Page from a GraphQL connection ({edges, pageInfo})."""
        if connection is None:
            raise PipefyRequestError(f"{operation} returned no connection", operation=operation)
        return Page.model_validate({
            "edges": connection.get("edges") or [],
            "pageInfo": connection.get("pageInfo") or {},
        })

    @classmethod
    def connection_fetcher(cls, request: RequestPage, path: Tuple[str, ...], operation: str) -> FetchPage:
        """Adapt a cursor -> GraphQLResponse call into a cursor -> Page fetch function.

        Args:
            request: Coroutine function issuing the request for one cursor
            path: Keys leading from ``data`` to the connection
            operation: Operation name used in error messages
        """
        async def fetch_page(cursor: Optional[str]) -> Page:
            response = await request(cursor)
            response.raise_for_errors(operation)
            return cls.page_from_connection(response.get(*path), operation)

        return fetch_page

    async def iterate(
        self,
        fetch_page: FetchPage,
        anomalies: Optional[List[PaginationAnomaly]] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Yield every edge of the collection, fetching lazily.

        Stopping iteration stops fetching. Anomalies found on the way are
        appended to ``anomalies`` when a list is given.
        """
        async for _, page in self._pages(fetch_page, anomalies):
            for edge in page.edges:
                yield edge

    async def collect(self, fetch_page: FetchPage) -> PaginatedResult:
        """Fetch the whole collection; any request error propagates and nothing is returned."""
        result = PaginatedResult()
        seen = set()

        async for page_number, page in self._pages(fetch_page, result.anomalies):
            result.pages = page_number
            for edge in page.edges:
                node_id = self._node_id(edge)
                if node_id is not None:
                    if node_id in seen:
                        self.logger.warning(
                            "Duplicate node %s on page %d (cursor %s)",
                            node_id, page_number, edge.get("cursor"),
                        )
                        result.anomalies.append(PaginationAnomaly(
                            kind=AnomalyKind.DUPLICATE_NODE,
                            page_number=page_number,
                            cursor=edge.get("cursor"),
                            node_id=node_id,
                        ))
                    seen.add(node_id)
                result.edges.append(edge)

        self.logger.debug("Collected %d edges over %d pages", len(result.edges), result.pages)
        return result

    async def _pages(
        self,
        fetch_page: FetchPage,
        anomalies: Optional[List[PaginationAnomaly]],
    ) -> AsyncIterator[Tuple[int, Page]]:
        cursor: Optional[str] = None
        page_number = 0

        while True:
            page = await fetch_page(cursor)
            page_number += 1
            self.logger.debug(
                "Fetched page %d with %d edges (after=%s)", page_number, len(page.edges), cursor,
            )
            yield page_number, page

            page_info = page.page_info
            if not page_info.has_next_page:
                break
            if not page_info.end_cursor:
                # no cursor to continue from
                self.logger.warning(
                    "Page %d reports more data but no endCursor; stopping", page_number,
                )
                if anomalies is not None:
                    anomalies.append(PaginationAnomaly(
                        kind=AnomalyKind.MISSING_CURSOR,
                        page_number=page_number,
                        cursor=cursor,
                        detail="hasNextPage is true but endCursor is empty",
                    ))
                break
            cursor = page_info.end_cursor

    @staticmethod
    def _node_id(edge: Dict[str, Any]) -> Optional[str]:
        node = edge.get("node")
        if isinstance(node, dict) and node.get("id") is not None:
            return str(node["id"])
        return None
