"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import Generator
from typing import Any

import pytest
import strawberry

ADD_ONE_HASH = "248eb276edb4f22aced0a2848c539810b55f79d89abc531b91145e76838f5602"
ADD_VARS_HASH = "495ccd73abc8436544cfeedd65f24beee660d2c7be2c32536e3fbf911f935ddf"
ADD_THREE_HASH = "03ec1635d1a0ea530672bf33f28f3533239a5a7021567840c541c31d5e28c65e"

PREPARED_QUERIES = {
    ADD_ONE_HASH: "{ add(x: 1, y: 1) }",
    ADD_VARS_HASH: "query Add($x: Int!, $y: Int!) { add(x: $x, y: $y) }",
    ADD_THREE_HASH: "{ add(x: 3, y: 3) }",
}

ADD_QUERY = """
        query AddQuery ($x: Int!, $y: Int!) {
            add(x: $x, y: $y)
        }"""


@strawberry.type
class Query:
    @strawberry.field
    async def add(self, x: int | None = None, y: int | None = None) -> int | None:
        return (x or 0) + (y or 0)


@pytest.fixture
def schema() -> strawberry.Schema:
    return strawberry.Schema(query=Query)


@pytest.fixture
def add_query() -> str:
    return ADD_QUERY


@pytest.fixture
def prepared_queries() -> dict[str, str]:
    return dict(PREPARED_QUERIES)


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")  # type: ignore[reportUnknownMemberType]
