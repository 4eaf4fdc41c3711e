"""
Application Routes

POST /applications/{job_id} - Apply to a job (veteran only, once per job)
GET /applications/job/{job_id} - Applicants with latest resume (job owner only)
GET /applications/my - Own applications with job summary
PUT /applications/{application_id}/status - Update status (job owner only)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from pymongo.errors import DuplicateKeyError
from typing import List

from app.core.auth import get_current_user, get_current_veteran
from app.services.candidate_service import get_candidate_service
from app.services.mongo_service import ApplicationService, JobService
from app.schemas.schemas import (
    ApplicationResponse, ApplicantResponse, MyApplicationResponse, ApplicationStatusUpdate
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/{job_id}", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(job_id: str, veteran: dict = Depends(get_current_veteran)):
    """Apply to a job. A veteran can apply to each job once."""
    job = JobService().get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    applications = ApplicationService()
    if applications.exists(job["id"], veteran["id"]):
        raise HTTPException(status_code=400, detail="You have already applied to this job")

    try:
        application = applications.insert(job["id"], veteran["id"])
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="You have already applied to this job")

    logger.info("User %s applied to job %s", veteran["id"], job["id"])
    return ApplicationResponse(**application)


@router.get("/job/{job_id}", response_model=List[ApplicantResponse])
async def get_job_applicants(job_id: str, user: dict = Depends(get_current_user)):
    """Applicants for a job, each with their latest resume. Job owner only."""
    job = JobService().get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.get("posted_by") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to view applicants for this job")

    applications = ApplicationService().list_by_job(job["id"])
    profiles = get_candidate_service().get_profiles([a["applicant"] for a in applications])

    return [
        {**application, "applicant_profile": profiles.get(application["applicant"])}
        for application in applications
    ]


@router.get("/my", response_model=List[MyApplicationResponse])
async def get_my_applications(veteran: dict = Depends(get_current_veteran)):
    """Own applications with job title, company, location and type."""
    applications = ApplicationService().list_by_applicant(veteran["id"])
    jobs = JobService()

    results = []
    for application in applications:
        job = jobs.get_by_id(application["job"])
        summary = None
        if job:
            summary = {k: job.get(k, "") for k in ("title", "company", "location", "type")}
            summary["id"] = job["id"]
        results.append({**application, "job_summary": summary})
    return results


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    user: dict = Depends(get_current_user)
):
    """Move an application through the hiring pipeline. Job owner only."""
    applications = ApplicationService()
    application = applications.get_by_id(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    job = JobService().get_by_id(application["job"])
    if not job or job.get("posted_by") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this application")

    updated = applications.update_status(application_id, update.status.value)
    return ApplicationResponse(**updated)
