"""
Resume Routes

POST /resume - Generate and store a resume from military history
GET /resume/me - Get own latest resume
PUT /resume/{resume_id} - Update own resume
POST /resume/parse - Extract military history from an uploaded file
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, File, Request, UploadFile

from app.core.auth import get_current_user
from app.core.config import get_settings
from app.core.rate_limit import limiter
from app.services.mongo_service import ResumeService
from app.services.resume_parsing_service import extract_military_data, get_resume_builder
from app.utils.file_upload import extract_text_from_file
from app.schemas.schemas import (
    ResumeCreate, ResumeUpdate, ResumeResponse, ResumeParseResponse
)

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/resume", tags=["Resume"])


@router.post("", response_model=ResumeResponse, status_code=201)
async def create_resume(data: ResumeCreate, user: dict = Depends(get_current_user)):
    """
    Build a civilian resume from military history.

    Summary, skills and experience bullets are generated from templates.
    """
    resume = get_resume_builder().create_resume(
        user,
        data.military_history,
        title=data.title,
        education=[e.model_dump() for e in data.education],
    )
    return ResumeResponse(**resume)


@router.get("/me", response_model=ResumeResponse)
async def get_my_resume(user: dict = Depends(get_current_user)):
    """Most recently created resume of the current user."""
    resume = ResumeService().get_latest_for_user(user["id"])
    if not resume:
        raise HTTPException(status_code=404, detail="No resume found")
    return ResumeResponse(**resume)


@router.put("/{resume_id}", response_model=ResumeResponse)
async def update_resume(resume_id: str, update: ResumeUpdate, user: dict = Depends(get_current_user)):
    """Update own resume. Only provided fields change."""
    resumes = ResumeService()
    resume = resumes.get_by_id(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    if resume.get("user") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this resume")

    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return ResumeResponse(**resume)

    return ResumeResponse(**resumes.update(resume_id, fields))


@router.post("/parse", response_model=ResumeParseResponse)
@limiter.limit(settings.upload_rate_limit)
async def parse_resume(
    request: Request,
    file: UploadFile = File(..., description="DD-214, VMET or resume (PDF, DOCX, TXT)"),
    user: dict = Depends(get_current_user)
):
    """
    Upload a service record and get the extracted military history back.

    Nothing is stored; the client reviews the fields and then calls POST /resume.
    """
    text, filename = await extract_text_from_file(file)
    history = extract_military_data(text)
    logger.info("Parsed %s for user %s (branch=%r, mos=%r)", filename, user["id"], history.branch, history.mos_code)
    return ResumeParseResponse(success=True, filename=filename, data=history)
