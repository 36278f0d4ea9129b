"""Read and cancel scheduled jobs."""

from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import JobPageData, ok
from core.event_bus import EventBus
from core.events import JobCancelled
from core.services.job_store import SchedulingStore
from core.services.view_service import MessageViewPaginator


def create_jobs_router(store: SchedulingStore, event_bus: EventBus | None = None) -> APIRouter:
    router = APIRouter()
    paginator = MessageViewPaginator(store)

    @router.get("/jobs")
    def list_pending(
        request: Request,
        owner_id: str = Query(..., min_length=1),
        offset: int = Query(0, ge=0),
        limit: int = Query(10, ge=1, le=50),
    ):
        page = paginator.page(owner_id, offset, limit)
        return ok(request, JobPageData(
            items=[job.model_dump(mode="json") for job in page.items],
            total=page.total,
            has_more=page.has_more,
        ))

    @router.get("/jobs/{job_id}")
    def get_job(request: Request, job_id: UUID):
        job = store.get(job_id)
        if job is None:
            raise ValueError(f"Job {job_id} not found")
        return ok(request, job)

    @router.post("/jobs/{job_id}/cancel")
    def cancel_job(request: Request, job_id: UUID, owner_id: str = Query(..., min_length=1)):
        job = store.cancel(owner_id, job_id)
        if event_bus is not None:
            event_bus.publish(JobCancelled.create(job))
        return ok(request, job)

    return router
