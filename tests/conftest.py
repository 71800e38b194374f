"""
Global pytest configuration and fixtures for the pipefy-helper tests.

This file contains shared fixtures and configurations that are available
to all test modules without explicit import.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Generator, List

import pytest  # type: ignore
from faker import Faker  # type: ignore

# Add the project root to Python path
project_root: Path = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pipefy_helper.sources.external.pipefy.helper import PipefyHelper  # noqa: E402
from pipefy_helper.sources.external.pipefy.pipefy import PipefyDataSource  # noqa: E402
from tests.fixtures.fake_pipefy import FakePipefyGateway  # noqa: E402

# Initialize Faker for generating test data
fake: Faker = Faker()
Faker.seed(4321)


# ============================================================================
# Session-level fixtures
# ============================================================================


@pytest.fixture(scope="session")
def faker_instance() -> Faker:
    """
    Provide a Faker instance for generating test data.

    Returns:
        Configured Faker instance
    """
    return fake


# ============================================================================
# Function-level fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """
    Reset environment state after each test.
    This ensures tests don't interfere with each other.
    """
    original_env: Dict[str, str] = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def gateway() -> FakePipefyGateway:
    """Empty in-memory Pipefy backend."""
    return FakePipefyGateway()


@pytest.fixture
def org_id(gateway: FakePipefyGateway) -> str:
    return gateway.add_organization()


@pytest.fixture
def data_source(gateway: FakePipefyGateway) -> PipefyDataSource:
    return PipefyDataSource(gateway.as_client())


@pytest.fixture
def helper(data_source: PipefyDataSource) -> PipefyHelper:
    return PipefyHelper(data_source)


@pytest.fixture
def make_table(gateway: FakePipefyGateway, org_id: str):
    """
    Factory creating a table with an "options" field and one record per value.

    Usage:
        table_id = make_table(["A", "A", "B"])
    """

    def _make(values: List[str], name: str = "Suppliers", field: str = "options") -> str:
        table_id = gateway.add_table(org_id, name, ["Name", field])
        for value in values:
            gateway.add_record(table_id, {"Name": fake.company(), field: value})
        return table_id

    return _make


# ============================================================================
# Test lifecycle hooks
# ============================================================================


def pytest_collection_modifyitems(config, items):
    """
    Add markers to tests based on the module they live in.
    """
    for item in items:
        if "pagination" in str(item.fspath):
            item.add_marker(pytest.mark.pagination)

        if "filter" in str(item.fspath):
            item.add_marker(pytest.mark.filters)
