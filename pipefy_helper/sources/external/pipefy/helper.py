import logging
from typing import Any, Dict, List, Optional, Union

from pipefy_helper.config.constants.pipefy import (
    MAX_CARD_BATCH_SIZE,
    MAX_RECORD_BATCH_SIZE,
)
from pipefy_helper.exceptions.pipefy_exceptions import (
    FilterIndexError,
    PipefyRequestError,
)
from pipefy_helper.models.filters import FieldFilter, PaginatedResult
from pipefy_helper.sources.client.graphql.response import GraphQLResponse
from pipefy_helper.sources.client.pipefy.pipefy import PipefyClient, PipefyTokenConfig
from pipefy_helper.sources.external.pipefy.csv_export import TableCSVExporter
from pipefy_helper.sources.external.pipefy.filter_index import FilterIndexManager
from pipefy_helper.sources.external.pipefy.filtered_query import FilteredQueryPlanner
from pipefy_helper.sources.external.pipefy.pagination import FetchPage, Paginator
from pipefy_helper.sources.external.pipefy.pipefy import PipefyDataSource
from pipefy_helper.utils.logger import create_logger

Edge = Dict[str, Any]


def _check_batch_size(batch_size: int, limit: int) -> int:
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return min(batch_size, limit)


class PipefyHelper:
    """Bulk helpers on top of PipefyDataSource.

    Full collection reads go through the Paginator, filtered reads through
    the Filters index. Request failures raise PipefyRequestError; filtered
    reads and Filters deletion report resolution problems as
    ``{"error": message}`` instead of raising.
    """

    def __init__(
        self,
        data_source: PipefyDataSource,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.data_source = data_source
        self.logger = logger or create_logger("helper")
        self.paginator = Paginator(self.logger)
        self.index_manager = FilterIndexManager(data_source, self.paginator, self.logger)
        self.planner = FilteredQueryPlanner(self.index_manager, self.paginator, self.logger)

    @classmethod
    def build_with_config(cls, config: PipefyTokenConfig, logger: Optional[logging.Logger] = None) -> "PipefyHelper":
        """Build a helper from token configuration."""
        client = PipefyClient.build_with_config(config)
        return cls(PipefyDataSource(client, logger), logger)

    # =============================================================================
    # TABLE RECORDS
    # =============================================================================

    async def get_all_records_result(
        self,
        table_id: str,
        batch_size: int = MAX_RECORD_BATCH_SIZE,
        search: Optional[Dict[str, Any]] = None,
    ) -> PaginatedResult:
        """Every record edge of a table with page count and pagination anomalies.

        ``search`` is sent as the TableRecordSearch argument of every page, e.g.
        ``{"title": "Acme"}``.
        """
        batch_size = _check_batch_size(batch_size, MAX_RECORD_BATCH_SIZE)
        fetch_page = self.index_manager.records_fetcher(table_id, search=search, batch_size=batch_size)
        return await self.paginator.collect(fetch_page)

    async def get_all_records(
        self,
        table_id: str,
        batch_size: int = MAX_RECORD_BATCH_SIZE,
        search: Optional[Dict[str, Any]] = None,
    ) -> List[Edge]:
        """Every record edge of a table matching ``search``, in server order."""
        result = await self.get_all_records_result(table_id, batch_size, search)
        return result.edges

    async def get_record_count(self, table_id: str) -> int:
        response = await self.data_source.table_records_count(table_id)
        response.raise_for_errors("table_records_count")
        count = response.get("table", "table_records_count")
        if count is None:
            raise PipefyRequestError(
                f"table_records_count returned no count for table {table_id}",
                operation="table_records_count",
            )
        return int(count)

    async def get_filtered_records(
        self,
        table_id: str,
        field_filter: Union[FieldFilter, Dict[str, Any], None],
    ) -> Union[List[Edge], Dict[str, str]]:
        """Records whose field matches one of the values, e.g.

        ``await helper.get_filtered_records(table_id, {"fieldName": "options", "includeValues": ["one"]})``

        Check the result for an ``error`` key before using it as data.
        """
        return await self.planner.get_filtered_records(table_id, field_filter)

    async def delete_field_filter(self, table_id: str, field_id: str) -> Union[bool, Dict[str, str]]:
        """Drop the index rows of one field. True also when there was nothing to delete."""
        try:
            deleted = await self.index_manager.delete_field_filter(table_id, field_id)
        except FilterIndexError as e:
            self.logger.warning("Cannot delete field filter of table %s: %s", table_id, e.message)
            return {"error": e.message}
        self.logger.debug("Deleted %d index rows of table %s field %s", deleted, table_id, field_id)
        return True

    async def delete_table(self, table_id: str) -> GraphQLResponse:
        return await self.data_source.delete_table(table_id)

    async def delete_records(self, table_id: str, selected_ids: Optional[List[str]] = None) -> int:
        """Delete every record of a table, or only those in ``selected_ids``; returns the count."""
        selected = None if selected_ids is None else {str(record_id) for record_id in selected_ids}
        records = await self.get_all_records(table_id)

        deleted = 0
        for edge in records:
            record_id = str((edge.get("node") or {}).get("id"))
            if selected is not None and record_id not in selected:
                continue
            response = await self.data_source.delete_table_record(record_id)
            response.raise_for_errors("deleteTableRecord")
            deleted += 1
        self.logger.info("Deleted %d records from table %s", deleted, table_id)
        return deleted

    async def create_table_fields(self, table_id: str, fields: List[Dict[str, Any]]) -> List[str]:
        """Create fields one after another; returns their ids in the same order.

        Each entry holds createTableField input, e.g. {"type": "short_text", "label": "Name"}.
        """
        field_ids = []
        for field in fields:
            settings = {key: value for key, value in field.items() if key != "table_id"}
            response = await self.data_source.create_table_field(table_id=table_id, **settings)
            response.raise_for_errors("createTableField")
            field_ids.append(str(response.get("createTableField", "table_field", "id")))
        return field_ids

    async def export_table_to_csv(self, table_id: str, path: str, exporter: Optional[TableCSVExporter] = None) -> int:
        """Write every record of a table to a CSV file headed by the field labels."""
        table = await self.index_manager.get_table(table_id)
        records = await self.get_all_records(table_id)
        exporter = exporter or TableCSVExporter()
        return exporter.export(path, table.get("table_fields") or [], records, table.get("name"))

    # =============================================================================
    # CARDS
    # =============================================================================

    def _phase_cards_fetcher(self, phase_id: str, batch_size: int) -> FetchPage:
        async def request(cursor: Optional[str]):
            return await self.data_source.phase_cards(phase_id, first=batch_size, after=cursor)

        return Paginator.connection_fetcher(request, ("phase", "cards"), "phase_cards")

    def _pipe_cards_fetcher(self, pipe_id: str, batch_size: int) -> FetchPage:
        async def request(cursor: Optional[str]):
            return await self.data_source.all_cards(pipe_id, first=batch_size, after=cursor)

        return Paginator.connection_fetcher(request, ("allCards",), "all_cards")

    async def get_all_cards_from_phase(self, phase_id: str, batch_size: int = MAX_CARD_BATCH_SIZE) -> List[Edge]:
        batch_size = _check_batch_size(batch_size, MAX_CARD_BATCH_SIZE)
        result = await self.paginator.collect(self._phase_cards_fetcher(phase_id, batch_size))
        return result.edges

    async def get_all_cards_from_pipe(self, pipe_id: str, batch_size: int = MAX_CARD_BATCH_SIZE) -> List[Edge]:
        batch_size = _check_batch_size(batch_size, MAX_CARD_BATCH_SIZE)
        result = await self.paginator.collect(self._pipe_cards_fetcher(pipe_id, batch_size))
        return result.edges

    async def get_card_count_from_phase(self, phase_id: str) -> int:
        response = await self.data_source.phase_cards_count(phase_id)
        response.raise_for_errors("phase_cards_count")
        count = int(response.get("phase", "cards_count") or 0)
        self.logger.debug("Phase %s has %d cards", phase_id, count)
        return count

    async def get_card_count_from_pipe(self, pipe_id: str) -> int:
        response = await self.data_source.pipe_cards_count(pipe_id)
        response.raise_for_errors("pipe_cards_count")
        count = int(response.get("pipe", "cards_count") or 0)
        self.logger.debug("Pipe %s has %d cards", pipe_id, count)
        return count

    async def delete_all_cards_from_pipe(self, pipe_id: str) -> int:
        """Delete every card of a pipe; returns how many were deleted."""
        cards = await self.get_all_cards_from_pipe(pipe_id)
        deleted = 0
        for edge in cards:
            response = await self.data_source.delete_card(str(edge["node"]["id"]))
            response.raise_for_errors("deleteCard")
            deleted += 1
        self.logger.info("Deleted %d cards from pipe %s", deleted, pipe_id)
        return deleted
