"""Dependencies of the notification run routes.

Resolved from the bootstrap singletons; tests override them with
``app.dependency_overrides``.
"""

from ipdocket.application.ports.run_log import RunLogProtocol
from ipdocket.bootstrap.urgent_notifications import (
    get_notification_job_config,
    get_run_log,
)


async def get_run_log_dependency() -> RunLogProtocol:
    """Run log the routes read from."""
    return get_run_log()


async def get_job_name_dependency() -> str:
    """Name of the job whose runs are listed."""
    return get_notification_job_config().job_name
