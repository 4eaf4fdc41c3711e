"""
Success Story Routes

POST /stories - Share a success story (veteran only, published immediately)
GET /stories - Approved stories, newest first
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_veteran
from app.services.mongo_service import StoryService, UserService
from app.schemas.schemas import StoryCreate, StoryResponse, StoryStatus

router = APIRouter(prefix="/stories", tags=["Success Stories"])


def _author_name(user: dict) -> str:
    return f"{user.get('first_name', '')} {user.get('last_name', '')}".strip()


@router.post("", response_model=StoryResponse, status_code=201)
async def create_story(data: StoryCreate, veteran: dict = Depends(get_current_veteran)):
    story = StoryService().insert(veteran["id"], data.model_dump(), status=StoryStatus.approved.value)
    return StoryResponse(**story, author_name=_author_name(veteran))


@router.get("", response_model=List[StoryResponse])
async def list_stories():
    stories = StoryService().list_approved()
    authors = UserService().get_many([s["user"] for s in stories])
    return [
        {**story, "author_name": _author_name(authors[story["user"]]) if story["user"] in authors else None}
        for story in stories
    ]
