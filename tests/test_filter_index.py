"""
Filter index tests: Filters table resolution, value matrix build/store, deletes.
"""
import pytest  # type: ignore

from pipefy_helper.config.constants.pipefy import FILTER_TABLE_NAME, FilterColumn
from pipefy_helper.exceptions.pipefy_exceptions import (
    FieldNotFoundError,
    FilterSchemaError,
    PipefyRequestError,
    ReservedTableError,
    TableNotFoundError,
)
from pipefy_helper.models.filters import EnhancedFilter, FilterIndexRow, FilterTableInfo
from pipefy_helper.sources.external.pipefy.filter_index import FilterIndexManager


@pytest.fixture
def manager(data_source) -> FilterIndexManager:
    return FilterIndexManager(data_source)


def rows_for(rows, table_id, field_id):
    return [row for row in rows if row.matches(table_id, field_id)]


@pytest.mark.unit
class TestFilterTableResolution:
    """Find-or-create of the per-organization Filters table."""

    @pytest.mark.asyncio
    async def test_creates_table_with_columns_in_order(self, manager, gateway, org_id, make_table):
        table_id = make_table(["A"])

        info = await manager.resolve_filter_table(table_id)

        assert info.is_new is True
        assert info.org_id == org_id
        filters = gateway.tables[info.filter_table_id]
        assert filters["name"] == FILTER_TABLE_NAME
        assert [f["label"] for f in filters["fields"]] == [column.value for column in FilterColumn]
        assert [f["type"] for f in filters["fields"]] == ["short_text"] * 4 + ["long_text"]
        assert all(f["required"] for f in filters["fields"])
        assert [info.column_id(column) for column in FilterColumn] == [f["id"] for f in filters["fields"]]

    @pytest.mark.asyncio
    async def test_existing_table_is_reused(self, manager, gateway, make_table):
        table_id = make_table(["A"])
        created = await manager.resolve_filter_table(table_id)

        found = await manager.resolve_filter_table(table_id)

        assert found.is_new is False
        assert found.filter_table_id == created.filter_table_id
        assert found.column_ids == created.column_ids
        assert len(gateway.calls_to("createTable")) == 1

    @pytest.mark.asyncio
    async def test_filters_table_found_beyond_first_page(self, manager, gateway, org_id, make_table):
        for i in range(60):
            gateway.add_table(org_id, f"Table {i}", ["Name"])
        table_id = make_table(["A"])
        created = await manager.create_filter_table(org_id)

        found = await manager.resolve_filter_table(table_id)

        assert found.filter_table_id == created.filter_table_id
        assert len(gateway.calls_to("organization_tables")) == 2

    @pytest.mark.asyncio
    async def test_unknown_table(self, manager):
        with pytest.raises(TableNotFoundError, match="Could not find table with tableID: 999"):
            await manager.resolve_filter_table("999")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["Permission denied", "Table not found", "Record does not exist"])
    async def test_not_found_errors_mean_unknown_table(self, manager, gateway, message):
        gateway.fail("table", message)

        with pytest.raises(TableNotFoundError):
            await manager.get_table("999")

    @pytest.mark.asyncio
    async def test_other_server_errors_are_raised(self, manager, gateway, make_table):
        table_id = make_table(["A"])
        gateway.fail("table", "Internal server error")

        with pytest.raises(PipefyRequestError, match="table failed: Internal server error"):
            await manager.get_table(table_id)

    @pytest.mark.asyncio
    async def test_filters_table_itself_is_rejected(self, manager, make_table):
        info = await manager.resolve_filter_table(make_table(["A"]))

        with pytest.raises(ReservedTableError, match="Cannot filter table Filters"):
            await manager.resolve_filter_table(info.filter_table_id)

    @pytest.mark.asyncio
    async def test_incomplete_filters_table_fails_fast(self, manager, gateway, org_id, make_table):
        gateway.add_table(org_id, FILTER_TABLE_NAME, ["Filter Name", "Table ID", "Value"])
        table_id = make_table(["A"])

        with pytest.raises(FilterSchemaError) as exc_info:
            await manager.resolve_filter_table(table_id)

        assert exc_info.value.missing_columns == ["Field ID", "Record IDs"]
        assert "Field ID, Record IDs" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_locate_never_creates(self, manager, gateway, make_table):
        table_id = make_table(["A"])

        assert await manager.locate_filter_table(table_id) is None
        assert gateway.calls_to("createTable") == []

    @pytest.mark.asyncio
    async def test_field_id_by_label(self, manager, gateway, make_table):
        table_id = make_table(["A"])

        assert await manager.get_field_id(table_id, "options") == gateway.field_id(table_id, "options")
        with pytest.raises(FieldNotFoundError, match="Field colour not found in tableID"):
            await manager.get_field_id(table_id, "colour")


@pytest.mark.unit
class TestValueMatrix:
    """Grouping of record ids by exact field value, and its storage."""

    @pytest.mark.asyncio
    async def test_round_trip(self, manager, gateway, make_table):
        table_id = make_table(["A", "A", "B", "C"], name="Suppliers")
        field_id = gateway.field_id(table_id, "options")
        record_ids = [r["id"] for r in gateway.tables[table_id]["records"]]
        info = await manager.resolve_filter_table(table_id)

        matrix = await manager.build_value_matrix(table_id, field_id)
        await manager.store_value_matrix(matrix, info, table_id, field_id)
        rows = rows_for(await manager.read_index_rows(info), table_id, field_id)

        assert [group.value for group in matrix] == ["A", "B", "C"]
        assert matrix[0].name == "Suppliers : options : A"
        assert len(rows) == 3
        by_value = {row.value: row for row in rows}
        assert set(by_value["A"].record_ids) == set(record_ids[:2])
        assert by_value["B"].record_ids == [record_ids[2]]
        assert by_value["A"].filter_name == "Suppliers : options : A"

    @pytest.mark.asyncio
    async def test_grouping_is_exact(self, manager, gateway, make_table):
        table_id = make_table(["one", "One", "one ", "one"])
        field_id = gateway.field_id(table_id, "options")

        matrix = await manager.build_value_matrix(table_id, field_id)

        assert [(group.value, len(group.ids)) for group in matrix] == [("one", 2), ("One", 1), ("one ", 1)]

    @pytest.mark.asyncio
    async def test_records_without_the_field_form_their_own_group(self, manager, gateway, make_table):
        table_id = make_table(["A"])
        missing = gateway.add_record(table_id, {"Name": "no option"})
        field_id = gateway.field_id(table_id, "options")
        info = await manager.resolve_filter_table(table_id)

        matrix = await manager.build_value_matrix(table_id, field_id)
        await manager.store_value_matrix(matrix, info, table_id, field_id)
        rows = rows_for(await manager.read_index_rows(info), table_id, field_id)

        assert matrix[1].value is None
        assert matrix[1].ids == [missing]
        assert {row.value for row in rows} == {"A", ""}

    @pytest.mark.asyncio
    async def test_missing_and_empty_values_share_one_row(self, manager, gateway, make_table):
        table_id = make_table(["A", ""])
        missing = gateway.add_record(table_id, {"Name": "no option"})
        field_id = gateway.field_id(table_id, "options")
        empty = gateway.tables[table_id]["records"][1]["id"]
        info = await manager.resolve_filter_table(table_id)

        await manager.rebuild_field_index(info, table_id, field_id)
        rows = rows_for(await manager.read_index_rows(info), table_id, field_id)

        assert sorted(row.value for row in rows) == ["", "A"]
        blank = next(row for row in rows if row.value == "")
        assert set(blank.record_ids) == {empty, missing}

    @pytest.mark.asyncio
    async def test_values_with_the_same_text_share_one_row(self, manager, gateway, org_id):
        table_id = gateway.add_table(org_id, "Stock", ["Name", "options"])
        number = gateway.add_record(table_id, {"Name": "bolts", "options": 1})
        text = gateway.add_record(table_id, {"Name": "nuts", "options": "1"})
        field_id = gateway.field_id(table_id, "options")
        info = await manager.resolve_filter_table(table_id)

        matrix = await manager.build_value_matrix(table_id, field_id)
        await manager.store_value_matrix(matrix, info, table_id, field_id)
        rows = rows_for(await manager.read_index_rows(info), table_id, field_id)

        assert [(group.value, group.ids) for group in matrix] == [("1", [number, text])]
        assert len(rows) == 1
        assert rows[0].record_ids == [number, text]

    @pytest.mark.asyncio
    async def test_rebuild_replaces_instead_of_merging(self, manager, gateway, make_table):
        table_id = make_table(["A", "A", "B", "C"])
        field_id = gateway.field_id(table_id, "options")
        info = await manager.resolve_filter_table(table_id)

        await manager.rebuild_field_index(info, table_id, field_id)
        await manager.rebuild_field_index(info, table_id, field_id)
        rows = rows_for(await manager.read_index_rows(info), table_id, field_id)

        assert len(rows) == 3
        assert len(gateway.calls_to("createTableRecord")) == 6
        assert len(gateway.calls_to("deleteTableRecord")) == 3

    @pytest.mark.asyncio
    async def test_rebuild_leaves_other_fields_alone(self, manager, gateway, make_table):
        table_id = make_table(["A", "B"])
        options_id = gateway.field_id(table_id, "options")
        name_id = gateway.field_id(table_id, "Name")
        info = await manager.resolve_filter_table(table_id)

        await manager.rebuild_field_index(info, table_id, name_id)
        await manager.rebuild_field_index(info, table_id, options_id)
        await manager.rebuild_field_index(info, table_id, options_id)
        rows = await manager.read_index_rows(info)

        assert len(rows_for(rows, table_id, name_id)) == 2
        assert len(rows_for(rows, table_id, options_id)) == 2


@pytest.mark.unit
class TestIndexQueries:
    """Presence check and ignore list computed from index rows."""

    @pytest.mark.asyncio
    async def test_presence_and_ignore_ids(self, manager, gateway, make_table):
        table_id = make_table(["A", "B", "B", "C"])
        field_id = gateway.field_id(table_id, "options")
        record_ids = [r["id"] for r in gateway.tables[table_id]["records"]]
        info = await manager.resolve_filter_table(table_id)
        await manager.rebuild_field_index(info, table_id, field_id)

        wanted = EnhancedFilter(filter_table_info=info, table_id=table_id, field_id=field_id, include_values=["A"])
        unknown = EnhancedFilter(filter_table_info=info, table_id=table_id, field_id=field_id, include_values=["Z"])

        assert await manager.field_filter_exists(wanted) is True
        assert await manager.field_filter_exists(unknown) is False
        assert await manager.get_ignore_ids(wanted) == record_ids[1:]
        assert set(await manager.get_ignore_ids(unknown)) == set(record_ids)

    @pytest.mark.asyncio
    async def test_ignore_ids_have_no_duplicates(self, manager):
        info = FilterTableInfo(
            org_id="1",
            filter_table_id="2",
            column_ids={column: str(i) for i, column in enumerate(FilterColumn)},
        )
        rows = [
            FilterIndexRow(record_id="r1", table_id="10", field_id="f", value="B", record_ids=["1", "2"]),
            FilterIndexRow(record_id="r2", table_id="10", field_id="f", value="C", record_ids=["2", "3"]),
            FilterIndexRow(record_id="r3", table_id="10", field_id="g", value="C", record_ids=["4"]),
            FilterIndexRow(record_id="r4", table_id="10", field_id="f", value="A", record_ids=["5"]),
        ]
        enhanced = EnhancedFilter(filter_table_info=info, table_id="10", field_id="f", include_values=["A"])

        assert await manager.get_ignore_ids(enhanced, rows) == ["1", "2", "3"]

    def test_record_ids_column_format(self):
        assert FilterIndexRow.serialize_record_ids(["1", "22", "333"]) == "1,22,333"
        assert FilterIndexRow.parse_record_ids("1, 22,,333") == ["1", "22", "333"]
        assert FilterIndexRow.parse_record_ids(None) == []


@pytest.mark.unit
class TestDeleteFieldFilter:
    """Deleting the index rows of one field."""

    @pytest.mark.asyncio
    async def test_no_rows_means_no_deletions(self, manager, gateway, make_table):
        table_id = make_table(["A"])
        field_id = gateway.field_id(table_id, "options")
        await manager.resolve_filter_table(table_id)

        assert await manager.delete_field_filter(table_id, field_id) == 0
        assert gateway.calls_to("deleteTableRecord") == []

    @pytest.mark.asyncio
    async def test_without_filters_table_nothing_is_created(self, manager, gateway, make_table):
        table_id = make_table(["A"])

        assert await manager.delete_field_filter(table_id, "field_x") == 0
        assert gateway.calls_to("createTable") == []

    @pytest.mark.asyncio
    async def test_deletes_only_matching_rows(self, manager, gateway, make_table):
        table_id = make_table(["A", "B", "C"])
        options_id = gateway.field_id(table_id, "options")
        name_id = gateway.field_id(table_id, "Name")
        info = await manager.resolve_filter_table(table_id)
        await manager.rebuild_field_index(info, table_id, options_id)
        await manager.rebuild_field_index(info, table_id, name_id)

        assert await manager.delete_field_filter(table_id, options_id) == 3
        rows = await manager.read_index_rows(info)
        assert rows_for(rows, table_id, options_id) == []
        assert len(rows_for(rows, table_id, name_id)) == 3

    @pytest.mark.asyncio
    async def test_failed_delete_raises(self, manager, gateway, make_table):
        table_id = make_table(["A"])
        field_id = gateway.field_id(table_id, "options")
        info = await manager.resolve_filter_table(table_id)
        await manager.rebuild_field_index(info, table_id, field_id)
        gateway.fail("deleteTableRecord", "Not allowed")

        with pytest.raises(PipefyRequestError, match="Not allowed"):
            await manager.delete_field_filter(table_id, field_id)
