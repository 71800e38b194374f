"""Pipefy data source, pagination and Filters index helpers."""

from .filter_index import FilterIndexManager
from .filtered_query import FilteredQueryPlanner
from .helper import PipefyHelper
from .pagination import Paginator
from .pipefy import PipefyDataSource

__all__ = [
    "FilterIndexManager",
    "FilteredQueryPlanner",
    "Paginator",
    "PipefyDataSource",
    "PipefyHelper",
]
