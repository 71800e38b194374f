"""
Paginator tests: completeness, ordering, termination and anomaly reporting.
"""
from typing import Any, Dict, List, Optional

import pytest  # type: ignore

from pipefy_helper.exceptions.pipefy_exceptions import PipefyRequestError
from pipefy_helper.models.filters import AnomalyKind, Page
from pipefy_helper.sources.external.pipefy.pagination import Paginator


def scripted_fetch(pages: List[Dict[str, Any]]):
    """Fetch function serving the given pages in order and remembering the cursors it got."""
    seen_cursors: List[Optional[str]] = []

    async def fetch_page(cursor: Optional[str]) -> Page:
        seen_cursors.append(cursor)
        return Page.model_validate(pages[len(seen_cursors) - 1])

    fetch_page.seen_cursors = seen_cursors
    return fetch_page


def edge(node_id: str) -> Dict[str, Any]:
    return {"cursor": f"c{node_id}", "node": {"id": node_id}}


@pytest.mark.unit
class TestPaginatorCompleteness:
    """Every record comes back exactly once and in server order."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "total,batch_size",
        [(0, 1), (1, 1), (5, 1), (5, 2), (5, 5), (5, 10), (7, 3), (120, 50)],
    )
    async def test_all_records_in_insertion_order(self, helper, gateway, org_id, total, batch_size):
        table_id = gateway.add_table(org_id, "Inventory", ["Name"])
        expected = [gateway.add_record(table_id, {"Name": f"item {i}"}) for i in range(total)]

        edges = await helper.get_all_records(table_id, batch_size=batch_size)

        assert [e["node"]["id"] for e in edges] == expected
        expected_pages = max(1, -(-total // batch_size))
        assert len(gateway.calls_to("table_records")) == expected_pages

    @pytest.mark.asyncio
    async def test_page_size_is_capped_at_pipefy_limit(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Inventory", ["Name"])
        for i in range(3):
            gateway.add_record(table_id, {"Name": f"item {i}"})

        await helper.get_all_records(table_id, batch_size=500)

        assert gateway.calls_to("table_records")[0]["first"] == 50

    @pytest.mark.asyncio
    async def test_batch_size_below_one_is_rejected(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Inventory", ["Name"])
        with pytest.raises(ValueError):
            await helper.get_all_records(table_id, batch_size=0)

    @pytest.mark.asyncio
    async def test_empty_first_page(self):
        fetch_page = scripted_fetch([{"edges": [], "pageInfo": {"hasNextPage": False}}])

        result = await Paginator().collect(fetch_page)

        assert result.edges == []
        assert result.pages == 1
        assert result.anomalies == []

    @pytest.mark.asyncio
    async def test_cursor_of_previous_page_is_passed_on(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1")], "pageInfo": {"hasNextPage": True, "endCursor": "after-1"}},
            {"edges": [edge("2")], "pageInfo": {"hasNextPage": True, "endCursor": "after-2"}},
            {"edges": [edge("3")], "pageInfo": {"hasNextPage": False, "endCursor": "after-3"}},
        ])

        result = await Paginator().collect(fetch_page)

        assert [e["node"]["id"] for e in result.edges] == ["1", "2", "3"]
        assert fetch_page.seen_cursors == [None, "after-1", "after-2"]


@pytest.mark.unit
class TestPaginatorTermination:
    """hasNextPage decides when to stop; a missing cursor never restarts the walk."""

    @pytest.mark.asyncio
    async def test_no_next_page_stops_even_with_cursor(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1")], "pageInfo": {"hasNextPage": False, "endCursor": "more?"}},
        ])

        result = await Paginator().collect(fetch_page)

        assert len(fetch_page.seen_cursors) == 1
        assert len(result.edges) == 1

    @pytest.mark.asyncio
    async def test_no_next_page_stops_without_cursor(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1")], "pageInfo": {"hasNextPage": False, "endCursor": None}},
        ])

        result = await Paginator().collect(fetch_page)

        assert len(fetch_page.seen_cursors) == 1
        assert result.anomalies == []

    @pytest.mark.asyncio
    async def test_next_page_without_cursor_is_reported(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1"), edge("2")], "pageInfo": {"hasNextPage": True, "endCursor": None}},
            {"edges": [edge("1"), edge("2")], "pageInfo": {"hasNextPage": False}},
        ])

        result = await Paginator().collect(fetch_page)

        assert len(fetch_page.seen_cursors) == 1
        assert [e["node"]["id"] for e in result.edges] == ["1", "2"]
        assert [a.kind for a in result.anomalies] == [AnomalyKind.MISSING_CURSOR]
        assert result.anomalies[0].page_number == 1

    @pytest.mark.asyncio
    async def test_iterate_is_lazy(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1"), edge("2")], "pageInfo": {"hasNextPage": True, "endCursor": "p1"}},
            {"edges": [edge("3")], "pageInfo": {"hasNextPage": False}},
        ])

        async for first in Paginator().iterate(fetch_page):
            assert first["node"]["id"] == "1"
            break

        assert fetch_page.seen_cursors == [None]


@pytest.mark.unit
class TestPaginatorAnomalies:
    """Repeated nodes are kept and reported."""

    @pytest.mark.asyncio
    async def test_duplicate_nodes_are_kept_and_reported(self):
        fetch_page = scripted_fetch([
            {"edges": [edge("1"), edge("2")], "pageInfo": {"hasNextPage": True, "endCursor": "p1"}},
            {"edges": [edge("2"), edge("3")], "pageInfo": {"hasNextPage": False}},
        ])

        result = await Paginator().collect(fetch_page)

        assert [e["node"]["id"] for e in result.edges] == ["1", "2", "2", "3"]
        assert len(result.anomalies) == 1
        anomaly = result.anomalies[0]
        assert anomaly.kind == AnomalyKind.DUPLICATE_NODE
        assert anomaly.node_id == "2"
        assert anomaly.page_number == 2


@pytest.mark.unit
class TestPaginatorErrors:
    """Request errors abort the walk with no partial result."""

    @pytest.mark.asyncio
    async def test_error_on_later_page_propagates(self):
        calls = []

        async def fetch_page(cursor):
            calls.append(cursor)
            if cursor is not None:
                raise PipefyRequestError("table_records failed: boom", operation="table_records")
            return Page.model_validate(
                {"edges": [edge("1")], "pageInfo": {"hasNextPage": True, "endCursor": "p1"}}
            )

        with pytest.raises(PipefyRequestError, match="boom"):
            await Paginator().collect(fetch_page)
        assert calls == [None, "p1"]

    @pytest.mark.asyncio
    async def test_gateway_error_propagates_through_helper(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Inventory", ["Name"])
        gateway.fail("table_records", "Permission denied")

        with pytest.raises(PipefyRequestError) as exc_info:
            await helper.get_all_records(table_id)

        assert exc_info.value.operation == "table_records"
        assert exc_info.value.errors[0]["message"] == "Permission denied"

    def test_missing_connection_is_a_request_error(self):
        with pytest.raises(PipefyRequestError):
            Paginator.page_from_connection(None, "table_records")

    def test_page_from_connection_reads_page_info(self):
        page = Paginator.page_from_connection({
            "edges": [edge("9")],
            "pageInfo": {"endCursor": "x", "hasNextPage": True},
        })

        assert page.page_info.end_cursor == "x"
        assert page.page_info.has_next_page is True
        assert page.edges[0]["node"]["id"] == "9"


@pytest.mark.unit
class TestCollectionHelpers:
    """Counts and card walks built on the Paginator."""

    @pytest.mark.asyncio
    async def test_record_count(self, helper, make_table):
        table_id = make_table(["A", "B", "C", "D"])

        assert await helper.get_record_count(table_id) == 4

    @pytest.mark.asyncio
    async def test_cards_from_phase_and_pipe(self, helper, gateway):
        pipe_id, phase_ids = gateway.add_pipe([31, 4])

        phase_cards = await helper.get_all_cards_from_phase(phase_ids[0])
        pipe_cards = await helper.get_all_cards_from_pipe(pipe_id)

        assert len(phase_cards) == 31
        assert len(gateway.calls_to("phase_cards")) == 2
        assert len(pipe_cards) == 35
        assert await helper.get_card_count_from_phase(phase_ids[1]) == 4
        assert await helper.get_card_count_from_pipe(pipe_id) == 35

    @pytest.mark.asyncio
    async def test_delete_all_cards_from_pipe(self, helper, gateway):
        pipe_id, _ = gateway.add_pipe([3, 2])

        assert await helper.delete_all_cards_from_pipe(pipe_id) == 5
        assert await helper.get_card_count_from_pipe(pipe_id) == 0
