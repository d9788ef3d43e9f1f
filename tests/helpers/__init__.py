"""Test helpers for ipdocket tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    make_task / make_matter / make_actor: Domain object builders

Usage:
    from tests.helpers import FakeTimeAuthority, make_task
"""

from tests.helpers.docket_factory import make_actor, make_matter, make_task
from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = ["FakeTimeAuthority", "make_actor", "make_matter", "make_task"]
