from typing import Any, List, Optional


class PipefyError(Exception):
    """Base exception for pipefy-helper errors"""

    def __init__(self, message: str, details: dict = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PipefyRequestError(PipefyError):
    """Raised when the Pipefy API rejects a request or the transport fails"""

    def __init__(
        self,
        message: str = "Pipefy request failed",
        operation: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        details: dict = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.errors = errors or []


class FilterIndexError(PipefyError):
    """Base exception for Filters table resolution errors"""


class TableNotFoundError(FilterIndexError):
    """Raised when a table id does not resolve to a table"""

    def __init__(self, table_id: str, details: dict = None) -> None:
        super().__init__(f"Could not find table with tableID: {table_id}", details)
        self.table_id = table_id


class FieldNotFoundError(FilterIndexError):
    """Raised when a field label does not exist in a table"""

    def __init__(self, field_name: str, table_id: str, details: dict = None) -> None:
        super().__init__(f"Field {field_name} not found in tableID: {table_id}", details)
        self.field_name = field_name
        self.table_id = table_id


class ReservedTableError(FilterIndexError):
    """Raised when the Filters table itself is the filter target"""

    def __init__(self, table_name: str, details: dict = None) -> None:
        super().__init__(f"Cannot filter table {table_name}", details)
        self.table_name = table_name


class FilterSchemaError(FilterIndexError):
    """Raised when a Filters table lacks one of the reserved columns"""

    def __init__(self, filter_table_id: str, missing_columns: List[str], details: dict = None) -> None:
        super().__init__(
            f"Filters table {filter_table_id} is missing columns: {', '.join(missing_columns)}",
            details,
        )
        self.filter_table_id = filter_table_id
        self.missing_columns = missing_columns
