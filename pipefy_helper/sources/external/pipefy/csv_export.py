import csv
from typing import Any, Dict, List, Optional, TextIO

from pipefy_helper.utils.logger import create_logger

logger = create_logger("csv_export")


class TableCSVExporter:
    def __init__(
        self, delimiter: str = ",", quotechar: str = '"', encoding: str = "utf-8"
    ) -> None:
        """
        Initialize the exporter with CSV dialect parameters.

        Args:
            delimiter: Character used to separate fields (default: comma)
            quotechar: Character used for quoting fields (default: double quote)
            encoding: File encoding (default: utf-8)
        """
        self.delimiter = delimiter
        self.quotechar = quotechar
        self.encoding = encoding

    @staticmethod
    def build_rows(
        table_fields: List[Dict[str, Any]], edges: List[Dict[str, Any]]
    ) -> List[List[str]]:
        """One row per record, one column per table field in table order.

        A field the record does not carry is written as an empty string.
        """
        field_ids = [str(field.get("id")) for field in table_fields]
        rows = []
        for edge in edges:
            node = edge.get("node") or {}
            values = {}
            for record_field in node.get("record_fields") or []:
                field_id = str((record_field.get("field") or {}).get("id"))
                values[field_id] = record_field.get("value")
            rows.append([
                "" if values.get(field_id) is None else str(values[field_id])
                for field_id in field_ids
            ])
        return rows

    def write(
        self, stream: TextIO, table_fields: List[Dict[str, Any]], edges: List[Dict[str, Any]]
    ) -> int:
        """Write header and records to an open text stream; returns the number of records written."""
        writer = csv.writer(stream, delimiter=self.delimiter, quotechar=self.quotechar)
        writer.writerow([field.get("label") or "" for field in table_fields])
        rows = self.build_rows(table_fields, edges)
        writer.writerows(rows)
        return len(rows)

    def export(
        self,
        path: str,
        table_fields: List[Dict[str, Any]],
        edges: List[Dict[str, Any]],
        table_name: Optional[str] = None,
    ) -> int:
        """Write the table to ``path``, overwriting it."""
        with open(path, "w", newline="", encoding=self.encoding) as f:
            written = self.write(f, table_fields, edges)
        logger.info("Exported %d records of %s to %s", written, table_name or "table", path)
        return written
