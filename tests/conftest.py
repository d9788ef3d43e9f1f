"""
Pytest configuration and shared fixtures for ipdocket tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/<layer>/
"""

from collections.abc import Iterator

import pytest

from ipdocket.infrastructure.stubs.run_lock_stub import RunLockStub
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from ipdocket import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Time frozen at Monday 2026-03-02 08:00 UTC."""
    return FakeTimeAuthority()


@pytest.fixture(autouse=True)
def _reset_run_lock_stub() -> Iterator[None]:
    """RunLockStub shares holders across instances; isolate tests."""
    RunLockStub.reset_global_state()
    yield
    RunLockStub.reset_global_state()
