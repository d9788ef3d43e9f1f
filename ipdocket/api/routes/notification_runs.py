"""Notification run log routes.

Read-only view of the job run log for operators and alerting, e.g.
"last run failed" or "failures > 0".
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ipdocket.api.dependencies.notification_runs import (
    get_job_name_dependency,
    get_run_log_dependency,
)
from ipdocket.api.models.notification_runs import JobRunListResponse, JobRunResponse
from ipdocket.application.ports.run_log import RunLogProtocol

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])


@router.get("/runs", response_model=JobRunListResponse)
async def list_runs(
    run_log: Annotated[RunLogProtocol, Depends(get_run_log_dependency)],
    job_name: Annotated[str, Depends(get_job_name_dependency)],
    limit: Annotated[int, Query(ge=1, le=200)] = 20,
) -> JobRunListResponse:
    """List the most recent runs of the urgent task notification job."""
    summaries = await run_log.list_recent(limit=limit, job_name=job_name)
    runs = [JobRunResponse.from_summary(s) for s in summaries]
    return JobRunListResponse(job_name=job_name, runs=runs, count=len(runs))


@router.get("/runs/latest", response_model=JobRunResponse)
async def latest_run(
    run_log: Annotated[RunLogProtocol, Depends(get_run_log_dependency)],
    job_name: Annotated[str, Depends(get_job_name_dependency)],
) -> JobRunResponse:
    """Return the most recent run.

    Raises:
        HTTPException: 404 if the job has never run.
    """
    summaries = await run_log.list_recent(limit=1, job_name=job_name)
    if not summaries:
        raise HTTPException(status_code=404, detail=f"No runs recorded for {job_name}")
    return JobRunResponse.from_summary(summaries[0])
