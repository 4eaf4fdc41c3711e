"""
Job Routes

GET /jobs - List active jobs, newest first (public)
GET /jobs/matches - Ranked job matches for the current veteran
GET /jobs/my-jobs - Jobs posted by the current employer
POST /jobs - Create job posting (employer only)
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update job (owner only)
DELETE /jobs/{job_id} - Delete job (owner only)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from app.core.auth import get_current_user, get_current_veteran, get_current_employer
from app.services.matching_service import get_matching_service
from app.services.mongo_service import JobService
from app.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobMatchResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _get_owned_job(job_id: str, user: dict) -> dict:
    job = JobService().get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.get("posted_by") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this job")
    return job


@router.get("", response_model=List[JobResponse])
async def list_jobs():
    """All active job postings, newest first."""
    return JobService().list_active()


@router.get("/matches", response_model=List[JobMatchResponse])
async def get_job_matches(veteran: dict = Depends(get_current_veteran)):
    """
    Active jobs ranked by match score for the current veteran.

    Score (0-100) combines MOS code, security clearance, key skills and
    location from the veteran's persona. Jobs scoring 0 are left out.
    """
    return get_matching_service().get_job_matches(veteran)


@router.get("/my-jobs", response_model=List[JobResponse])
async def get_my_jobs(employer: dict = Depends(get_current_employer)):
    """Jobs posted by the current employer, newest first."""
    return JobService().list_by_poster(employer["id"])


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, employer: dict = Depends(get_current_employer)):
    """Create a new job posting. Only employers can create jobs."""
    created = JobService().insert(employer["id"], job.model_dump(mode="json"))
    logger.info("Job %s posted by %s", created["id"], employer["id"])
    return JobResponse(**created)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str):
    """Get job details."""
    job = JobService().get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse(**job)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: str, update: JobUpdate, user: dict = Depends(get_current_user)):
    """Update job. Only the employer who posted it can update."""
    job = _get_owned_job(job_id, user)

    fields = update.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if not fields:
        return JobResponse(**job)

    return JobResponse(**JobService().update(job_id, fields))


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, user: dict = Depends(get_current_user)):
    """Delete job. Only the employer who posted it can delete."""
    _get_owned_job(job_id, user)
    JobService().delete(job_id)
    logger.info("Job %s removed by %s", job_id, user["id"])
    return MessageResponse(message="Job removed")
