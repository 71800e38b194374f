import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from pipefy_helper.exceptions.pipefy_exceptions import FilterIndexError
from pipefy_helper.models.filters import (
    AnomalyKind,
    EnhancedFilter,
    FieldFilter,
    FilteredRecordsResult,
    PaginationAnomaly,
)
from pipefy_helper.sources.external.pipefy.filter_index import (
    FilterIndexManager,
    record_field_value,
)
from pipefy_helper.sources.external.pipefy.pagination import Paginator
from pipefy_helper.utils.logger import create_logger

FilterInput = Union[FieldFilter, Dict[str, Any], None]


class FilteredQueryPlanner:
    """Answers "records of table T whose field F is one of V" through the Filters index.

    Per call: resolve the Filters table, resolve the field id, rebuild the
    field index when it is new or does not cover the requested values, turn
    the index rows of every other value into an ignore list, then fetch the
    table with ``search: {ignore_ids}``.

    Resolution problems come back as ``{"error": message}``; request errors
    propagate.
    """

    def __init__(
        self,
        index_manager: FilterIndexManager,
        paginator: Optional[Paginator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.index_manager = index_manager
        self.logger = logger or create_logger("filtered_query")
        self.paginator = paginator or index_manager.paginator

    async def get_filtered_records(
        self,
        table_id: str,
        field_filter: FilterInput,
    ) -> Union[List[Dict[str, Any]], Dict[str, str]]:
        """Edges of the matching records, or {"error": message}."""
        result = await self.get_filtered_records_detailed(table_id, field_filter)
        if isinstance(result, dict):
            return result
        return result.records

    async def get_filtered_records_detailed(
        self,
        table_id: str,
        field_filter: FilterInput,
    ) -> Union[FilteredRecordsResult, Dict[str, str]]:
        """Same as get_filtered_records, also reporting rebuilds, the ignore list and anomalies."""
        try:
            parsed = self._parse_filter(field_filter)
        except ValidationError as e:
            self.logger.warning("Rejected filter for table %s: %s", table_id, e)
            return {"error": f"Invalid filter: {e.errors()[0]['msg'] if e.errors() else e}"}

        try:
            info = await self.index_manager.resolve_filter_table(table_id)
            field_id = await self.index_manager.get_field_id(table_id, parsed.field_name)
        except FilterIndexError as e:
            self.logger.warning("Filtered query on table %s not possible: %s", table_id, e.message)
            return {"error": e.message}

        enhanced_filter = EnhancedFilter(
            filter_table_info=info,
            table_id=str(table_id),
            field_id=field_id,
            include_values=parsed.include_values,
        )
        result = FilteredRecordsResult()

        rows = None
        if info.is_new:
            needs_rebuild = True
        else:
            rows = await self.index_manager.read_index_rows(info)
            needs_rebuild = not await self.index_manager.field_filter_exists(enhanced_filter, rows)

        if needs_rebuild:
            self.logger.debug("Rebuilding index of table %s field %s", table_id, field_id)
            await self.index_manager.rebuild_field_index(info, enhanced_filter.table_id, field_id)
            result.rebuilt = True
            rows = None

        result.ignored_ids = await self.index_manager.get_ignore_ids(enhanced_filter, rows)

        fetch_page = self.index_manager.records_fetcher(
            enhanced_filter.table_id, search={"ignore_ids": result.ignored_ids},
        )
        fetched = await self.paginator.collect(fetch_page)
        result.anomalies.extend(fetched.anomalies)

        drifted: List[PaginationAnomaly] = []
        for edge in fetched.edges:
            node = edge.get("node") or {}
            value = record_field_value(node, field_id)
            if enhanced_filter.includes(value):
                result.records.append(edge)
                continue
            drifted.append(PaginationAnomaly(
                kind=AnomalyKind.INDEX_DRIFT,
                node_id=str(node.get("id")),
                detail=f"value {value!r} is not covered by the index",
            ))

        if drifted:
            # value appeared after the last rebuild
            self.logger.warning(
                "Dropped %d records of table %s with values missing from the index of field %s",
                len(drifted), table_id, field_id,
            )
            result.anomalies.extend(drifted)
            await self.index_manager.rebuild_field_index(info, enhanced_filter.table_id, field_id)
            result.rebuilt = True

        return result

    @staticmethod
    def _parse_filter(field_filter: FilterInput) -> FieldFilter:
        if isinstance(field_filter, FieldFilter):
            return field_filter
        return FieldFilter.model_validate(field_filter)
