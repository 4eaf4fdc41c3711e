"""
Saved Candidate Routes

POST /saved-candidates - Bookmark a veteran (optionally for a job)
GET /saved-candidates - Own bookmarks with candidate profiles
DELETE /saved-candidates/{saved_id} - Remove a bookmark
"""

from fastapi import APIRouter, HTTPException, Depends
from pymongo.errors import DuplicateKeyError
from typing import List

from app.core.auth import get_current_employer
from app.services.candidate_service import get_candidate_service
from app.services.mongo_service import SavedCandidateService, UserService
from app.schemas.schemas import (
    SavedCandidateCreate, SavedCandidateResponse, MessageResponse
)

router = APIRouter(prefix="/saved-candidates", tags=["Saved Candidates"])


@router.post("", response_model=SavedCandidateResponse, status_code=201)
async def save_candidate(data: SavedCandidateCreate, employer: dict = Depends(get_current_employer)):
    candidate = UserService().get_by_id(data.candidate_id)
    if not candidate or candidate.get("role") != "veteran":
        raise HTTPException(status_code=404, detail="Candidate not found")

    saved = SavedCandidateService()
    if saved.exists(employer["id"], candidate["id"], data.job_id):
        raise HTTPException(status_code=400, detail="Candidate already saved")

    try:
        bookmark = saved.insert(employer["id"], candidate["id"], data.job_id, data.notes)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Candidate already saved")
    return SavedCandidateResponse(**bookmark)


@router.get("", response_model=List[SavedCandidateResponse])
async def list_saved_candidates(employer: dict = Depends(get_current_employer)):
    bookmarks = SavedCandidateService().list_by_employer(employer["id"])
    profiles = get_candidate_service().get_profiles([b["candidate"] for b in bookmarks])
    return [{**b, "candidate_profile": profiles.get(b["candidate"])} for b in bookmarks]


@router.delete("/{saved_id}", response_model=MessageResponse)
async def remove_saved_candidate(saved_id: str, employer: dict = Depends(get_current_employer)):
    saved = SavedCandidateService()
    bookmark = saved.get_by_id(saved_id)
    if not bookmark:
        raise HTTPException(status_code=404, detail="Saved candidate not found")
    if bookmark["employer"] != employer["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to remove this bookmark")

    saved.delete(saved_id)
    return MessageResponse(message="Candidate removed")
