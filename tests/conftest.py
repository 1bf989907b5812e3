import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Run the async tests on asyncio only; the engine relies on asyncio tasks."""

    return "asyncio"
