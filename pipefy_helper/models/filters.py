from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pipefy_helper.config.constants.pipefy import RECORD_IDS_SEPARATOR, FilterColumn


class PageInfo(BaseModel):
    """Relay page info as returned by Pipefy connections"""

    model_config = ConfigDict(populate_by_name=True)

    end_cursor: Optional[str] = Field(default=None, alias="endCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    has_previous_page: bool = Field(default=False, alias="hasPreviousPage")
    start_cursor: Optional[str] = Field(default=None, alias="startCursor")


class Page(BaseModel):
    """One fetch result: edges in server order plus page info"""

    model_config = ConfigDict(populate_by_name=True)

    edges: List[Dict[str, Any]] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class AnomalyKind(str, Enum):
    DUPLICATE_NODE = "duplicate_node"
    MISSING_CURSOR = "missing_cursor"
    INDEX_DRIFT = "index_drift"


class PaginationAnomaly(BaseModel):
    kind: AnomalyKind
    page_number: Optional[int] = None
    cursor: Optional[str] = None
    node_id: Optional[str] = None
    detail: Optional[str] = None


class PaginatedResult(BaseModel):
    edges: List[Dict[str, Any]] = Field(default_factory=list)
    pages: int = 0
    anomalies: List[PaginationAnomaly] = Field(default_factory=list)


class FilterTableInfo(BaseModel):
    """Descriptor of the Filters table of one organization"""

    org_id: str
    filter_table_id: str
    column_ids: Dict[FilterColumn, str]
    is_new: bool = False

    def column_id(self, column: FilterColumn) -> str:
        return self.column_ids[column]


class FilterIndexRow(BaseModel):
    """One persisted Filters table record"""

    record_id: str
    filter_name: Optional[str] = None
    table_id: Optional[str] = None
    field_id: Optional[str] = None
    value: Optional[str] = None
    record_ids: List[str] = Field(default_factory=list)

    def matches(self, table_id: str, field_id: str) -> bool:
        return self.table_id == str(table_id) and self.field_id == str(field_id)

    @staticmethod
    def parse_record_ids(raw: Optional[str]) -> List[str]:
        if not raw:
            return []
        return [part.strip() for part in raw.split(RECORD_IDS_SEPARATOR) if part.strip()]

    @staticmethod
    def serialize_record_ids(ids: List[str]) -> str:
        return RECORD_IDS_SEPARATOR.join(str(record_id) for record_id in ids)


class ValueGroup(BaseModel):
    """Record ids sharing one distinct field value"""

    name: str
    table_id: str
    field_id: str
    value: Optional[str] = None
    ids: List[str] = Field(default_factory=list)


class FieldFilter(BaseModel):
    """Equality filter on one field, as supplied by callers"""

    model_config = ConfigDict(populate_by_name=True)

    field_name: str = Field(..., alias="fieldName", min_length=1)
    include_values: List[Optional[str]] = Field(default_factory=list, alias="includeValues")

    @field_validator("include_values", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple, set)):
            return [value if value is None else str(value) for value in v]
        return v


class EnhancedFilter(BaseModel):
    """Request-scoped filter with resolved ids"""

    filter_table_info: FilterTableInfo
    table_id: str
    field_id: str
    include_values: List[Optional[str]] = Field(default_factory=list)

    def includes(self, value: Optional[str]) -> bool:
        return index_value(value) in {index_value(v) for v in self.include_values}


class FilteredRecordsResult(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    rebuilt: bool = False
    ignored_ids: List[str] = Field(default_factory=list)
    anomalies: List[PaginationAnomaly] = Field(default_factory=list)


def index_value(value: Any) -> str:
    """Text form a field value takes inside the Filters table."""
    if value is None:
        return ""
    return str(value)
