import logging
from typing import Any, Dict, List, Optional

from pipefy_helper.config.constants.pipefy import (
    FILTER_TABLE_NAME,
    MAX_RECORD_BATCH_SIZE,
    MAX_TABLE_BATCH_SIZE,
    NOT_FOUND_ERROR_MARKERS,
    FilterColumn,
)
from pipefy_helper.exceptions.pipefy_exceptions import (
    FieldNotFoundError,
    FilterSchemaError,
    PipefyRequestError,
    ReservedTableError,
    TableNotFoundError,
)
from pipefy_helper.models.filters import (
    EnhancedFilter,
    FilterIndexRow,
    FilterTableInfo,
    ValueGroup,
    index_value,
)
from pipefy_helper.sources.external.pipefy.pagination import FetchPage, Paginator
from pipefy_helper.sources.external.pipefy.pipefy import PipefyDataSource
from pipefy_helper.utils.logger import create_logger


def record_field_value(node: Dict[str, Any], field_id: str) -> Optional[Any]:
    """Raw value of ``field_id`` in a table record node, None when the record omits it."""
    for record_field in node.get("record_fields") or []:
        field = record_field.get("field") or {}
        if str(field.get("id")) == str(field_id):
            return record_field.get("value")
    return None


class FilterIndexManager:
    """Maintains the per-organization Filters table.

    Each Filters row maps one (table id, field id, value) to the comma-joined
    ids of the records holding that value. Rows are only ever replaced as a
    whole set per (table id, field id): delete every matching row, then insert.
    """

    def __init__(
        self,
        data_source: PipefyDataSource,
        paginator: Optional[Paginator] = None,
        logger: Optional[logging.Logger] = None,
        batch_size: int = MAX_RECORD_BATCH_SIZE,
    ) -> None:
        self.data_source = data_source
        self.logger = logger or create_logger("filter_index")
        self.paginator = paginator or Paginator(self.logger)
        self.batch_size = batch_size

    async def get_table(self, table_id: str) -> Dict[str, Any]:
        """Fetch table metadata (name, organization, table_fields).

        Pipefy answers an unknown id with "Permission denied" or a not-found
        error, so those messages mean the table does not exist for this token.

        Raises:
            TableNotFoundError: no table came back and the errors say it is unknown,
                or the server answered successfully with a null table
            PipefyRequestError: the request failed or the server reported any other error
        """
        response = await self.data_source.table(table_id)
        table = response.get("table")
        if table is not None:
            return table
        if response.errors:
            messages = [error.message.lower() for error in response.errors]
            if not any(marker in message for message in messages for marker in NOT_FOUND_ERROR_MARKERS):
                response.raise_for_errors("table")
            self.logger.debug("table %s lookup errors: %s", table_id, response.message)
        elif not response.success:
            response.raise_for_errors("table")
        raise TableNotFoundError(table_id)

    def records_fetcher(
        self,
        table_id: str,
        search: Optional[Dict[str, Any]] = None,
        batch_size: Optional[int] = None,
    ) -> FetchPage:
        """Fetch function over the records of a table, for use with the Paginator."""
        first = batch_size or self.batch_size

        async def request(cursor: Optional[str]):
            return await self.data_source.table_records(table_id, first=first, after=cursor, search=search)

        return Paginator.connection_fetcher(request, ("table_records",), "table_records")

    # =============================================================================
    # FILTERS TABLE RESOLUTION
    # =============================================================================

    async def resolve_filter_table(self, table_id: str) -> FilterTableInfo:
        """Find the Filters table of the organization owning ``table_id``, creating it if needed."""
        table = await self.get_table(table_id)
        if table.get("name") == FILTER_TABLE_NAME:
            raise ReservedTableError(FILTER_TABLE_NAME)

        org_id = str(table["organization"]["id"])
        existing = await self._find_filter_table(org_id)
        if existing is None:
            self.logger.info("No %s table in organization %s, creating one", FILTER_TABLE_NAME, org_id)
            return await self.create_filter_table(org_id)
        return await self._describe_filter_table(org_id, str(existing["id"]))

    async def locate_filter_table(self, table_id: str) -> Optional[FilterTableInfo]:
        """Like resolve_filter_table but never creates anything; None when there is no Filters table."""
        table = await self.get_table(table_id)
        org_id = str(table["organization"]["id"])
        existing = await self._find_filter_table(org_id)
        if existing is None:
            return None
        return await self._describe_filter_table(org_id, str(existing["id"]))

    async def create_filter_table(self, org_id: str) -> FilterTableInfo:
        """Create the Filters table and its five required columns, in column order."""
        response = await self.data_source.create_table(organization_id=org_id, name=FILTER_TABLE_NAME)
        response.raise_for_errors("createTable")
        filter_table_id = response.get("createTable", "table", "id")
        if filter_table_id is None:
            raise PipefyRequestError("createTable returned no table id", operation="createTable")
        filter_table_id = str(filter_table_id)

        column_ids: Dict[FilterColumn, str] = {}
        for column in FilterColumn:
            response = await self.data_source.create_table_field(
                table_id=filter_table_id,
                type=column.field_type.value,
                label=column.value,
                description=column.description,
                required=True,
            )
            response.raise_for_errors("createTableField")
            column_ids[column] = str(response.get("createTableField", "table_field", "id"))

        self.logger.info("Created %s table %s in organization %s", FILTER_TABLE_NAME, filter_table_id, org_id)
        return FilterTableInfo(
            org_id=org_id,
            filter_table_id=filter_table_id,
            column_ids=column_ids,
            is_new=True,
        )

    async def _find_filter_table(self, org_id: str) -> Optional[Dict[str, Any]]:
        async def request(cursor: Optional[str]):
            return await self.data_source.organization_tables(org_id, first=MAX_TABLE_BATCH_SIZE, after=cursor)

        fetch_page = Paginator.connection_fetcher(request, ("organization", "tables"), "organization_tables")
        async for edge in self.paginator.iterate(fetch_page):
            node = edge.get("node") or {}
            if node.get("name") == FILTER_TABLE_NAME:
                return node
        return None

    async def _describe_filter_table(self, org_id: str, filter_table_id: str) -> FilterTableInfo:
        table = await self.get_table(filter_table_id)
        ids_by_label = {
            field.get("label"): str(field.get("id"))
            for field in table.get("table_fields") or []
        }
        missing = [column.value for column in FilterColumn if column.value not in ids_by_label]
        if missing:
            raise FilterSchemaError(filter_table_id, missing)

        return FilterTableInfo(
            org_id=org_id,
            filter_table_id=filter_table_id,
            column_ids={column: ids_by_label[column.value] for column in FilterColumn},
            is_new=False,
        )

    async def get_field_id(self, table_id: str, field_name: str) -> str:
        """Id of the field labelled ``field_name`` in ``table_id``."""
        table = await self.get_table(table_id)
        for field in table.get("table_fields") or []:
            if field.get("label") == field_name:
                return str(field["id"])
        raise FieldNotFoundError(field_name, table_id)

    # =============================================================================
    # INDEX BUILD
    # =============================================================================

    async def build_value_matrix(self, table_id: str, field_id: str) -> List[ValueGroup]:
        """Group the record ids of a table by the exact value of one field.

        Groups keep the order in which their value first appeared. Records that
        do not carry the field at all share the None group, which also holds
        empty values since both are stored as "". Values are compared in the
        text form they take inside the Filters table, so 1 and "1" share a group.
        """
        table = await self.get_table(table_id)
        field_label = next(
            (
                field.get("label")
                for field in table.get("table_fields") or []
                if str(field.get("id")) == str(field_id)
            ),
            field_id,
        )

        # keyed by stored text so each Filters row key has exactly one group
        groups: Dict[str, ValueGroup] = {}
        async for edge in self.paginator.iterate(self.records_fetcher(table_id)):
            node = edge.get("node") or {}
            value = record_field_value(node, field_id)
            key = index_value(value)
            group = groups.get(key)
            if group is None:
                group = ValueGroup(
                    name=f"{table.get('name')} : {field_label} : {key}",
                    table_id=str(table_id),
                    field_id=str(field_id),
                    value=None if value is None else key,
                )
                groups[key] = group
            elif value is not None:
                group.value = key
            group.ids.append(str(node.get("id")))

        self.logger.debug(
            "Value matrix for table %s field %s has %d groups", table_id, field_id, len(groups),
        )
        return list(groups.values())

    async def store_value_matrix(
        self,
        matrix: List[ValueGroup],
        info: FilterTableInfo,
        table_id: str,
        field_id: str,
    ) -> int:
        """Replace every Filters row of (table_id, field_id) with one row per group.

        Returns the number of rows inserted.
        """
        deleted = await self._delete_rows(info, table_id, field_id)
        self.logger.debug("Deleted %d old rows for table %s field %s", deleted, table_id, field_id)

        for group in matrix:
            fields_attributes = [
                {"field_id": info.column_id(FilterColumn.FILTER_NAME), "field_value": group.name},
                {"field_id": info.column_id(FilterColumn.TABLE_ID), "field_value": group.table_id},
                {"field_id": info.column_id(FilterColumn.FIELD_ID), "field_value": group.field_id},
                {"field_id": info.column_id(FilterColumn.VALUE), "field_value": index_value(group.value)},
                {
                    "field_id": info.column_id(FilterColumn.RECORD_IDS),
                    "field_value": FilterIndexRow.serialize_record_ids(group.ids),
                },
            ]
            response = await self.data_source.create_table_record(
                table_id=info.filter_table_id,
                title=group.name,
                fields_attributes=fields_attributes,
            )
            response.raise_for_errors("createTableRecord")

        self.logger.info("Indexed %d values of table %s field %s", len(matrix), table_id, field_id)
        return len(matrix)

    async def rebuild_field_index(self, info: FilterTableInfo, table_id: str, field_id: str) -> List[ValueGroup]:
        """Build the value matrix of a field and store it."""
        matrix = await self.build_value_matrix(table_id, field_id)
        await self.store_value_matrix(matrix, info, table_id, field_id)
        return matrix

    # =============================================================================
    # INDEX READ
    # =============================================================================

    async def read_index_rows(self, info: FilterTableInfo) -> List[FilterIndexRow]:
        """Read every row of the Filters table."""
        columns = {column_id: column for column, column_id in info.column_ids.items()}
        rows: List[FilterIndexRow] = []

        async for edge in self.paginator.iterate(self.records_fetcher(info.filter_table_id)):
            node = edge.get("node") or {}
            values: Dict[FilterColumn, Any] = {}
            for record_field in node.get("record_fields") or []:
                column = columns.get(str((record_field.get("field") or {}).get("id")))
                if column is not None:
                    values[column] = record_field.get("value")

            rows.append(FilterIndexRow(
                record_id=str(node.get("id")),
                filter_name=values.get(FilterColumn.FILTER_NAME),
                table_id=values.get(FilterColumn.TABLE_ID),
                field_id=values.get(FilterColumn.FIELD_ID),
                value=index_value(values.get(FilterColumn.VALUE)),
                record_ids=FilterIndexRow.parse_record_ids(values.get(FilterColumn.RECORD_IDS)),
            ))
        return rows

    async def field_filter_exists(
        self,
        enhanced_filter: EnhancedFilter,
        rows: Optional[List[FilterIndexRow]] = None,
    ) -> bool:
        """Whether a row of (table, field) covers one of the filter's values."""
        if rows is None:
            rows = await self.read_index_rows(enhanced_filter.filter_table_info)
        return any(
            row.matches(enhanced_filter.table_id, enhanced_filter.field_id)
            and enhanced_filter.includes(row.value)
            for row in rows
        )

    async def get_ignore_ids(
        self,
        enhanced_filter: EnhancedFilter,
        rows: Optional[List[FilterIndexRow]] = None,
    ) -> List[str]:
        """Record ids of every indexed value the filter does not include, without duplicates."""
        if rows is None:
            rows = await self.read_index_rows(enhanced_filter.filter_table_info)

        ignore_ids: List[str] = []
        seen = set()
        for row in rows:
            if not row.matches(enhanced_filter.table_id, enhanced_filter.field_id):
                continue
            if enhanced_filter.includes(row.value):
                continue
            for record_id in row.record_ids:
                if record_id not in seen:
                    seen.add(record_id)
                    ignore_ids.append(record_id)
        return ignore_ids

    # =============================================================================
    # INDEX DELETE
    # =============================================================================

    async def delete_field_filter(self, table_id: str, field_id: str) -> int:
        """Delete every Filters row of (table_id, field_id); returns how many were deleted.

        Does nothing, and creates nothing, when the organization has no Filters table.
        """
        info = await self.locate_filter_table(table_id)
        if info is None:
            self.logger.debug("No %s table for table %s, nothing to delete", FILTER_TABLE_NAME, table_id)
            return 0
        return await self._delete_rows(info, table_id, field_id)

    async def _delete_rows(self, info: FilterTableInfo, table_id: str, field_id: str) -> int:
        rows = await self.read_index_rows(info)
        deleted = 0
        for row in rows:
            if not row.matches(table_id, field_id):
                continue
            response = await self.data_source.delete_table_record(row.record_id)
            response.raise_for_errors("deleteTableRecord")
            if response.get("deleteTableRecord", "success") is False:
                raise PipefyRequestError(
                    f"deleteTableRecord failed for Filters row {row.record_id}",
                    operation="deleteTableRecord",
                )
            deleted += 1
        return deleted
