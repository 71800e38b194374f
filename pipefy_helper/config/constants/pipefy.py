from enum import Enum

PIPEFY_GRAPHQL_ENDPOINT = "https://api.pipefy.com/graphql"
DEFAULT_TIMEOUT = 30

# Upper limits Pipefy applies per page
MAX_CARD_BATCH_SIZE = 30
MAX_RECORD_BATCH_SIZE = 50
MAX_TABLE_BATCH_SIZE = 50

FILTER_TABLE_NAME = "Filters"
RECORD_IDS_SEPARATOR = ","

# Error texts Pipefy answers with for an id it will not resolve
NOT_FOUND_ERROR_MARKERS = ("not found", "permission denied", "does not exist")


class FieldType(str, Enum):
    """Pipefy field type ids used when creating table fields"""

    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    NUMBER = "number"
    SELECT = "select"


class FilterColumn(str, Enum):
    """Column labels of the Filters table, in creation order"""

    FILTER_NAME = "Filter Name"
    TABLE_ID = "Table ID"
    FIELD_ID = "Field ID"
    VALUE = "Value"
    RECORD_IDS = "Record IDs"

    @property
    def field_type(self) -> FieldType:
        if self is FilterColumn.RECORD_IDS:
            return FieldType.LONG_TEXT
        return FieldType.SHORT_TEXT

    @property
    def description(self) -> str:
        return FILTER_COLUMN_DESCRIPTIONS[self]


FILTER_COLUMN_DESCRIPTIONS = {
    FilterColumn.FILTER_NAME: "Name of the filter",
    FilterColumn.TABLE_ID: "ID of the table to filter",
    FilterColumn.FIELD_ID: "ID of the field to filter",
    FilterColumn.VALUE: "Field value shared by the listed records",
    FilterColumn.RECORD_IDS: "IDs of the records matching the value",
}


class EnvVars(str, Enum):
    """Environment variables read by PipefyClient.build_from_env"""

    API_TOKEN = "PIPEFY_API_TOKEN"
    TIMEOUT = "PIPEFY_TIMEOUT"
    ENDPOINT = "PIPEFY_ENDPOINT"
    LOG_LEVEL = "PIPEFY_LOG_LEVEL"
