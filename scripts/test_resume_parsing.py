#!/usr/bin/env python3
"""
Resume Parsing & Matching Smoke Script

Runs without a database:
1. Extract military history from a sample service record
2. Generate civilian resume content from it
3. Score a sample job against a persona built from the record

Run: python scripts/test_resume_parsing.py [path/to/record.txt]
"""
import sys
sys.path.insert(0, '.')

from app.schemas.schemas import CandidateMatchProfile, JobMatchCriteria
from app.services.matching_service import score
from app.services.resume_parsing_service import extract_military_data, generate_resume_content


# ============================================================
# SAMPLE DATA FOR TESTING
# ============================================================

SAMPLE_RECORD = """
CERTIFICATE OF RELEASE OR DISCHARGE FROM ACTIVE DUTY
NAME: DOE, JOHN A
DEPARTMENT, COMPONENT AND BRANCH: ARMY/RA
GRADE, RATE OR RANK: SSG
PRIMARY SPECIALTY: 11B Infantryman - 8 Yrs
DATE ENTERED ACTIVE DUTY: 2010 06 01
SEPARATION DATE: 2018 05 31
Served as Squad Leader for a 9-man infantry squad.
Security clearance: SECRET
DECORATIONS: Army Commendation Medal, Army Achievement Medal (2nd award)
"""

SAMPLE_JOB = JobMatchCriteria(
    job_id="sample",
    mos_codes=["11B", "11C"],
    security_clearance="Secret",
    key_skills=["Leadership", "Logistics", "Operational Planning"],
    city="Austin",
    state="Texas",
)


def main():
    text = SAMPLE_RECORD
    if len(sys.argv) > 1:
        with open(sys.argv[1], encoding="utf-8") as f:
            text = f.read()

    print("=" * 50)
    print("[1] Extracted military history")
    print("=" * 50)
    history = extract_military_data(text)
    for field, value in history.model_dump().items():
        print(f"    {field:20s}: {value}")

    print("\n" + "=" * 50)
    print("[2] Generated resume content")
    print("=" * 50)
    content = generate_resume_content(history)
    print(f"    Summary: {content.summary}")
    print("    Skills:")
    for skill in content.skills:
        print(f"      - {skill}")
    print("    Experience:")
    for bullet in content.experience:
        print(f"      - {bullet}")

    print("\n" + "=" * 50)
    print("[3] Match score against sample job")
    print("=" * 50)
    candidate = CandidateMatchProfile(
        mos_code=history.mos_code,
        security_clearance=history.security_clearance,
        skills=["Leadership", "Operational Planning"],
        city="Austin",
        state="Texas",
    )
    result = score(SAMPLE_JOB, candidate)
    print(f"    Score: {result.score}/100")
    print(f"    Exact MOS match: {result.details.mos_match}")
    print(f"    Matching skills: {result.details.skill_match_count}")


if __name__ == "__main__":
    main()
