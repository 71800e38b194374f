"""
PipefyHelper record and field helpers.
"""
import pytest  # type: ignore

from pipefy_helper.exceptions.pipefy_exceptions import PipefyRequestError


@pytest.mark.unit
class TestRecordHelpers:
    """Bulk record deletion and field creation."""

    @pytest.mark.asyncio
    async def test_delete_all_records(self, helper, gateway, make_table):
        table_id = make_table(["A"] * 55)

        assert await helper.delete_records(table_id) == 55
        assert await helper.get_record_count(table_id) == 0

    @pytest.mark.asyncio
    async def test_search_is_sent_with_every_page(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Suppliers", ["Name"])
        for i in range(60):
            gateway.add_record(table_id, {"Name": f"supplier {i}"}, title=f"Acme {i}" if i % 2 else f"Other {i}")

        records = await helper.get_all_records(table_id, batch_size=20, search={"title": "Acme"})

        assert len(records) == 30
        assert all(edge["node"]["title"].startswith("Acme") for edge in records)
        calls = gateway.calls_to("table_records")
        assert len(calls) == 2
        assert all(call["search"] == {"title": "Acme"} for call in calls)
        assert calls[0]["first"] == 20

    @pytest.mark.asyncio
    async def test_records_without_search_send_no_search(self, helper, gateway, make_table):
        table_id = make_table(["A", "B"])

        result = await helper.get_all_records_result(table_id)

        assert len(result.edges) == 2
        assert "search" not in gateway.calls_to("table_records")[0]

    @pytest.mark.asyncio
    async def test_delete_selected_records(self, helper, gateway, make_table):
        table_id = make_table(["A", "B", "C", "D"])
        record_ids = [r["id"] for r in gateway.tables[table_id]["records"]]

        deleted = await helper.delete_records(table_id, selected_ids=[record_ids[1], record_ids[3], "missing"])

        assert deleted == 2
        assert [r["id"] for r in gateway.tables[table_id]["records"]] == [record_ids[0], record_ids[2]]

    @pytest.mark.asyncio
    async def test_create_table_fields_keeps_order(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Contacts", [])

        field_ids = await helper.create_table_fields(table_id, [
            {"table_id": table_id, "type": "short_text", "label": "Name", "required": True},
            {"type": "long_text", "label": "Notes", "description": "Free text"},
        ])

        fields = gateway.tables[table_id]["fields"]
        assert field_ids == [f["id"] for f in fields]
        assert [f["label"] for f in fields] == ["Name", "Notes"]

    @pytest.mark.asyncio
    async def test_create_table_fields_stops_on_error(self, helper, gateway, org_id):
        table_id = gateway.add_table(org_id, "Contacts", [])
        gateway.fail("createTableField", "Invalid type")

        with pytest.raises(PipefyRequestError, match="createTableField failed: Invalid type"):
            await helper.create_table_fields(table_id, [{"type": "nope", "label": "X"}])

    @pytest.mark.asyncio
    async def test_delete_table(self, helper, gateway, make_table):
        table_id = make_table(["A"])

        response = await helper.delete_table(table_id)

        assert response.success is True
        assert table_id not in gateway.tables
