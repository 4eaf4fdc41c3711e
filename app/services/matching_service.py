"""
Job Matching Service

PURPOSE:
Score how well a job posting fits a veteran candidate, then rank all
active postings for that candidate.

HOW IT WORKS (additive point budget, max 100):
1. MOS/AFSC match        - up to 30 points
2. Security clearance    - up to 20 points
3. Key skills overlap    - up to 40 points
4. Location (city/state) - up to 10 points

Every factor is computed independently. A missing field simply scores
zero for that factor, so score() never raises.
"""

import logging
import math
from typing import List, Optional

from app.schemas.schemas import (
    CandidateMatchProfile,
    JobMatchCriteria,
    MatchDetails,
    MatchResult,
)
from app.services.mongo_service import JobService

logger = logging.getLogger(__name__)


MOS_EXACT_POINTS = 30
MOS_PARTIAL_POINTS = 15
CLEARANCE_POINTS = 20
SKILLS_MAX_POINTS = 40
CITY_POINTS = 10
STATE_POINTS = 5
MAX_SCORE = 100

# Ordered lowest to highest
CLEARANCE_LEVELS = ["None", "Confidential", "Secret", "Top Secret", "Top Secret/SCI"]


# ============================================================
# FACTOR HELPERS
# ============================================================

def _norm(value: Optional[str]) -> str:
    return (value or "").lower()


def _round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() would bank it)."""
    return int(math.floor(value + 0.5))


def clearance_level(name: Optional[str]) -> int:
    """
    Index of a clearance name in CLEARANCE_LEVELS (case-insensitive).

    Returns -1 for names outside the ordering, e.g. "Public Trust".
    """
    wanted = _norm(name)
    for index, level in enumerate(CLEARANCE_LEVELS):
        if level.lower() == wanted:
            return index
    return -1


def mos_points(job_codes: List[str], candidate_code: Optional[str]) -> int:
    """30 for an exact code match, 15 when one code prefixes the other."""
    if not candidate_code or not job_codes:
        return 0

    user_mos = candidate_code.lower()
    job_mos_list = [code.lower() for code in job_codes]

    if user_mos in job_mos_list:
        return MOS_EXACT_POINTS

    # e.g. 11B matches 11B10
    if any(user_mos.startswith(m) or m.startswith(user_mos) for m in job_mos_list):
        return MOS_PARTIAL_POINTS

    return 0


def clearance_points(job_clearance: Optional[str], candidate_clearance: Optional[str]) -> int:
    """
    Full points when the candidate's clearance meets the job's requirement.

    A job requiring "None" is met by any recognized clearance. An
    unrecognized name on either side scores zero.
    """
    user_level = clearance_level(candidate_clearance or "None")
    job_level = clearance_level(job_clearance or "None")

    if user_level == -1 or job_level == -1:
        return 0
    if user_level >= job_level:
        return CLEARANCE_POINTS
    return 0


def skill_overlap(job_skills: List[str], candidate_skills: List[str]) -> int:
    """Number of job skills the candidate also lists (case-insensitive)."""
    job_set = {s.lower() for s in job_skills if s}
    user_set = {s.lower() for s in candidate_skills if s}
    return len(job_set & user_set)


def skill_points(job_skills: List[str], candidate_skills: List[str]) -> int:
    """Share of the job's skills the candidate covers, scaled to 40."""
    job_set = {s.lower() for s in job_skills if s}
    if not job_set or not candidate_skills:
        return 0

    ratio = skill_overlap(job_skills, candidate_skills) / len(job_set)
    return _round_half_up(ratio * SKILLS_MAX_POINTS)


def location_points(
    job_city: Optional[str],
    job_state: Optional[str],
    candidate_city: Optional[str],
    candidate_state: Optional[str]
) -> int:
    """10 for the same city, otherwise 5 for the same state."""
    city_matched = bool(job_city and candidate_city) and _norm(job_city) == _norm(candidate_city)
    if city_matched:
        return CITY_POINTS

    if job_state and candidate_state and _norm(job_state) == _norm(candidate_state):
        # Two missing cities compare equal, which blocks the state bonus
        if _norm(candidate_city) != _norm(job_city):
            return STATE_POINTS

    return 0


# ============================================================
# SCORER
# ============================================================

def score(job: JobMatchCriteria, candidate: CandidateMatchProfile) -> MatchResult:
    """
    Compute the 0-100 compatibility score between a job and a candidate.

    Deterministic and side-effect free.
    """
    mos = mos_points(job.mos_codes, candidate.mos_code)
    total = (
        mos
        + clearance_points(job.security_clearance, candidate.security_clearance)
        + skill_points(job.key_skills, candidate.skills)
        + location_points(job.city, job.state, candidate.city, candidate.state)
    )
    total = max(0, min(total, MAX_SCORE))

    return MatchResult(
        score=total,
        details=MatchDetails(
            mos_match=mos == MOS_EXACT_POINTS,
            skill_match_count=skill_overlap(job.key_skills, candidate.skills)
        )
    )


# ============================================================
# DOCUMENT ADAPTERS
# ============================================================

def criteria_from_job(job_doc: dict) -> JobMatchCriteria:
    """Build scorer input from a stored job document."""
    prefs = job_doc.get("veteran_preferences") or {}
    return JobMatchCriteria(
        job_id=job_doc.get("id"),
        mos_codes=[c for c in (prefs.get("mos_codes") or []) if isinstance(c, str)],
        security_clearance=prefs.get("security_clearance") or "None",
        key_skills=[s for s in (job_doc.get("key_skills") or []) if isinstance(s, str)],
        city=job_doc.get("city"),
        state=job_doc.get("state"),
    )


def profile_from_user(user_doc: dict) -> CandidateMatchProfile:
    """Build scorer input from a stored veteran account (its persona)."""
    persona = user_doc.get("persona") or {}
    location = persona.get("current_location") or {}
    return CandidateMatchProfile(
        mos_code=persona.get("mos_code"),
        security_clearance=persona.get("security_clearance") or "None",
        skills=[s for s in (persona.get("skills") or []) if isinstance(s, str)],
        city=location.get("city"),
        state=location.get("state"),
    )


def rank_jobs(job_docs: List[dict], user_doc: dict) -> List[dict]:
    """
    Score every job for one candidate, drop zero scores, sort descending.

    Python's sort is stable, so equal scores keep the order job_docs
    came in (the caller loads them newest first).
    """
    candidate = profile_from_user(user_doc)
    matches = []

    for job in job_docs:
        result = score(criteria_from_job(job), candidate)
        if result.score <= 0:
            continue
        matches.append({
            "job_id": job["id"],
            "title": job.get("title", ""),
            "company": job.get("company", ""),
            "location": job.get("location", ""),
            "type": job.get("type", ""),
            "salary_range": job.get("salary_range"),
            "posted_at": job.get("created_at"),
            "score": result.score,
            "match_details": result.details.model_dump(),
        })

    matches.sort(key=lambda m: m["score"], reverse=True)
    logger.debug("Ranked %d of %d jobs for user %s", len(matches), len(job_docs), user_doc.get("id"))
    return matches


# ============================================================
# MATCHING SERVICE
# ============================================================

class JobMatchingService:
    """
    Ranks active job postings for a veteran.

    Process:
    1. Load all active jobs from MongoDB (newest first)
    2. Score each job against the veteran's persona
    3. Drop zero scores and sort by score
    """

    def __init__(self):
        self.job_service = JobService()

    def get_job_matches(self, user_doc: dict) -> List[dict]:
        jobs = self.job_service.list_active()
        return rank_jobs(jobs, user_doc)


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

def get_matching_service() -> JobMatchingService:
    """Get matching service instance."""
    return JobMatchingService()
