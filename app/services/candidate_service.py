"""
Candidate Service

Builds the employer-facing view of a veteran: account fields, persona and
the latest resume (summary, skills, experience, military history).
Used by the candidate search, applicant lists and saved candidates.
"""

from typing import Dict, List, Optional

from app.services.mongo_service import UserService, ResumeService


def resume_summary(resume: Optional[dict]) -> Optional[dict]:
    if not resume:
        return None
    return {
        "title": resume.get("title", ""),
        "summary": resume.get("generated_summary", ""),
        "skills": resume.get("generated_skills", []),
        "experience": resume.get("generated_experience", []),
        "military_history": resume.get("military_history") or {},
    }


def _location_label(user: dict) -> Optional[str]:
    location = (user.get("persona") or {}).get("current_location") or {}
    parts = [p for p in (location.get("city"), location.get("state")) if p]
    return ", ".join(parts) or None


def candidate_view(user: dict, resume: Optional[dict]) -> dict:
    return {
        "id": user["id"],
        "first_name": user.get("first_name", ""),
        "last_name": user.get("last_name", ""),
        "email": user.get("email", ""),
        "military_branch": user.get("military_branch"),
        "location": _location_label(user),
        "persona": user.get("persona"),
        "resume": resume_summary(resume),
    }


class CandidateService:
    def __init__(self):
        self.user_service = UserService()
        self.resume_service = ResumeService()

    def list_veterans(self) -> List[dict]:
        veterans = self.user_service.list_by_role("veteran")
        resumes = self.resume_service.get_latest_for_users([v["id"] for v in veterans])
        return [candidate_view(v, resumes.get(v["id"])) for v in veterans]

    def get_profiles(self, user_ids: List[str]) -> Dict[str, dict]:
        """Candidate views keyed by user id (unknown ids are absent)."""
        users = self.user_service.get_many(user_ids)
        resumes = self.resume_service.get_latest_for_users(list(users))
        return {uid: candidate_view(u, resumes.get(uid)) for uid, u in users.items()}


def get_candidate_service() -> CandidateService:
    return CandidateService()
