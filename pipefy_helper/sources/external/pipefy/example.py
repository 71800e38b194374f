# ruff: noqa
import asyncio
import os

from pipefy_helper.sources.client.pipefy.pipefy import PipefyClient
from pipefy_helper.sources.external.pipefy.helper import PipefyHelper
from pipefy_helper.sources.external.pipefy.pipefy import PipefyDataSource


async def main() -> None:
    """Example usage of the Pipefy helper: connection check, record count, filtered read."""
    if not os.getenv("PIPEFY_API_TOKEN"):
        print("❌ Please set PIPEFY_API_TOKEN environment variable (a .env file works too)")
        print("   Get your token from: https://app.pipefy.com/tokens")
        return

    client = PipefyClient.build_from_env()
    data_source = PipefyDataSource(client)
    helper = PipefyHelper(data_source)

    try:
        print("Validating connection...")
        me_response = await data_source.me()
        if not me_response.success:
            print(f"Failed to connect to Pipefy API: {me_response.message}")
            for error in me_response.errors or []:
                print(f"  Error: {error.message}")
            return
        me = me_response.get("me") or {}
        print(f"Connected as {me.get('name')} ({me.get('email')})")

        table_id = os.getenv("PIPEFY_TABLE_ID")
        if not table_id:
            print("Set PIPEFY_TABLE_ID to try the table helpers")
            return

        print(f"\n=== Table {table_id} ===")
        print(f"Records: {await helper.get_record_count(table_id)}")

        field_name = os.getenv("PIPEFY_FILTER_FIELD")
        field_value = os.getenv("PIPEFY_FILTER_VALUE")
        if field_name and field_value:
            print(f"\n=== Records where {field_name} = {field_value} ===")
            records = await helper.get_filtered_records(
                table_id, {"fieldName": field_name, "includeValues": [field_value]}
            )
            if "error" in records:
                print(f"Filter failed: {records['error']}")
            else:
                print(f"Found {len(records)} records:")
                for edge in records[:5]:
                    print(f"  - {edge['node'].get('title')} (ID: {edge['node'].get('id')})")

        csv_path = os.getenv("PIPEFY_EXPORT_PATH")
        if csv_path:
            written = await helper.export_table_to_csv(table_id, csv_path)
            print(f"\nExported {written} records to {csv_path}")
    finally:
        await client.get_client().close()


if __name__ == "__main__":
    asyncio.run(main())
