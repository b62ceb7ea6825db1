"""
Single-shot Proposal Job Routes

POST /api/jobs           - queue a long-form draft for a chosen strategy
GET  /api/status?jobId=  - poll the job
"""
import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel, Field

from bidguard.domain.errors import NotFoundError
from bidguard.middleware.auth import verify_key
from bidguard.services.job_service import JobService, get_job_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["jobs"])


class TriggerJobRequest(BaseModel):
    strategy_name: str = Field(..., min_length=1, max_length=100)
    executive_summary: str = Field(..., min_length=1, max_length=5000)
    project_name: str = Field(..., min_length=1, max_length=500)
    client_name: str = Field(..., min_length=1, max_length=200)
    research_summary: str = Field("", max_length=20000)


@router.post("/jobs")
async def trigger_job(
    request: TriggerJobRequest,
    _: dict = Depends(verify_key),
    service: JobService = Depends(get_job_service),
):
    try:
        job_id = service.trigger(**request.model_dump())
        return {"success": True, "jobId": job_id}
    except Exception as e:
        logger.error(f"Error triggering job: {str(e)}")
        raise HTTPException(500, "Failed to trigger job")


@router.get("/status")
async def job_status(
    job_id: str = Query(..., alias="jobId", min_length=1),
    _: dict = Depends(verify_key),
    service: JobService = Depends(get_job_service),
):
    try:
        return service.status(job_id)
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except Exception as e:
        logger.error(f"Error reading job status: {str(e)}")
        raise HTTPException(500, str(e))
