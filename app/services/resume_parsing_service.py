"""
Resume Parsing & Generation Service

PURPOSE:
1. Extract a structured military service record from free text
   (DD-214, VMET, or an existing resume) using keyword and regex rules
2. Generate civilian resume content (summary, skills, experience bullets)
   from a military service record using templates
3. Store generated resumes in MongoDB

Both the extractor and the generator are pure functions. Every field is
best-effort: anything not detected keeps its empty default instead of
raising, so partially garbled PDF text still produces a record.
"""

import logging
import re
from typing import List, Optional, Tuple

from app.schemas.schemas import GeneratedResumeContent, MilitaryHistory
from app.services.mongo_service import ResumeService

logger = logging.getLogger(__name__)


# ============================================================
# VOCABULARY TABLES (order matters: first match wins)
# ============================================================

# Reserve / Guard components are checked before their parent branch
BRANCH_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Army National Guard", ("army national guard", "arng")),
    ("Air National Guard", ("air national guard", "ang")),
    ("Army Reserve", ("army reserve", "usar")),
    ("Navy Reserve", ("navy reserve", "usnr")),
    ("Marine Corps Reserve", ("marine corps reserve", "usmcr")),
    ("Air Force Reserve", ("air force reserve", "usfr")),
    ("Coast Guard Reserve", ("coast guard reserve", "uscgr")),
    ("Army", ("army", "soldier", "usa")),
    ("Navy", ("navy", "sailor", "usn")),
    ("Air Force", ("air force", "airman", "usaf")),
    ("Marine Corps", ("marine", "corps", "usmc")),
    ("Coast Guard", ("coast guard", "uscg")),
    ("Space Force", ("space force", "ussf")),
]

RANK_TABLE: List[Tuple[str, str]] = [
    # Army enlisted
    ("pvt", "Private"), ("private", "Private"),
    ("pfc", "Private First Class"),
    ("spc", "Specialist"), ("specialist", "Specialist"),
    ("cpl", "Corporal"), ("corporal", "Corporal"),
    ("sgt", "Sergeant"), ("sergeant", "Sergeant"),
    ("ssg", "Staff Sergeant"), ("staff sergeant", "Staff Sergeant"),
    ("sfc", "Sergeant First Class"), ("sergeant first class", "Sergeant First Class"),
    ("msg", "Master Sergeant"), ("master sergeant", "Master Sergeant"),
    ("1sg", "First Sergeant"), ("first sergeant", "First Sergeant"),
    ("sgm", "Sergeant Major"), ("sergeant major", "Sergeant Major"),
    ("csm", "Command Sergeant Major"), ("command sergeant major", "Command Sergeant Major"),
    # Army officers
    ("2lt", "Second Lieutenant"), ("second lieutenant", "Second Lieutenant"),
    ("1lt", "First Lieutenant"), ("first lieutenant", "First Lieutenant"),
    ("cpt", "Captain"), ("captain", "Captain"),
    ("maj", "Major"), ("major", "Major"),
    ("ltc", "Lieutenant Colonel"), ("lieutenant colonel", "Lieutenant Colonel"),
    ("col", "Colonel"), ("colonel", "Colonel"),
    ("bg", "Brigadier General"), ("brigadier general", "Brigadier General"),
    ("mg", "Major General"), ("major general", "Major General"),
    ("ltg", "Lieutenant General"), ("lieutenant general", "Lieutenant General"),
    ("gen", "General"), ("general", "General"),
    # Navy / Coast Guard
    ("sr", "Seaman Recruit"), ("sa", "Seaman Apprentice"), ("sn", "Seaman"),
    ("po3", "Petty Officer Third Class"), ("petty officer third class", "Petty Officer Third Class"),
    ("po2", "Petty Officer Second Class"), ("petty officer second class", "Petty Officer Second Class"),
    ("po1", "Petty Officer First Class"), ("petty officer first class", "Petty Officer First Class"),
    ("cpo", "Chief Petty Officer"), ("chief petty officer", "Chief Petty Officer"),
    ("scpo", "Senior Chief Petty Officer"), ("senior chief petty officer", "Senior Chief Petty Officer"),
    ("mcpo", "Master Chief Petty Officer"), ("master chief petty officer", "Master Chief Petty Officer"),
    ("ens", "Ensign"), ("ensign", "Ensign"),
    ("ltjg", "Lieutenant Junior Grade"), ("lieutenant junior grade", "Lieutenant Junior Grade"),
    ("lt", "Lieutenant"), ("lieutenant", "Lieutenant"),
    ("lcdr", "Lieutenant Commander"), ("lieutenant commander", "Lieutenant Commander"),
    ("cdr", "Commander"), ("commander", "Commander"),
    ("capt", "Captain"),  # Navy captain shares the Army title
    ("adm", "Admiral"), ("admiral", "Admiral"),
    # Air Force
    ("ab", "Airman Basic"), ("amn", "Airman"), ("a1c", "Airman First Class"), ("sra", "Senior Airman"),
    ("tsgt", "Technical Sergeant"), ("technical sergeant", "Technical Sergeant"),
    ("msgt", "Master Sergeant"),
    ("smsgt", "Senior Master Sergeant"), ("senior master sergeant", "Senior Master Sergeant"),
    ("cmsgt", "Chief Master Sergeant"), ("chief master sergeant", "Chief Master Sergeant"),
]

# Longest keys first so "staff sergeant" wins over "sergeant" (stable for ties)
_RANK_PATTERNS = [
    (re.compile(rf"\b{re.escape(key)}\b", re.IGNORECASE), rank)
    for key, rank in sorted(RANK_TABLE, key=lambda pair: len(pair[0]), reverse=True)
]

MOS_LINE_KEYWORDS = ("mos", "afsc", "rate", "specialty", "code", "job")

# Army 11B / 42A, four digit codes, Air Force 1A0X1 style
MOS_PATTERN = re.compile(r"\b([0-9]{2}[A-Z]|[0-9]{4}|[0-9][A-Z][0-9][A-Z][0-9])\b")

YEAR_PATTERN = re.compile(r"\b(?:19|20)[0-9]{2}\b")
MAX_PLAUSIBLE_SERVICE_YEARS = 40

LEADERSHIP_KEYWORDS = (
    "team leader", "squad leader", "platoon sergeant", "detachment commander",
    "department head", "oic", "ncoic", "supervisor",
)

AWARD_KEYWORDS = (
    "bronze star", "commendation medal", "achievement medal",
    "meritorious service", "purple heart", "distinguished service",
)

DESCRIPTION_LENGTH = 500


# ============================================================
# FIELD EXTRACTORS
# ============================================================

def _title_case(phrase: str) -> str:
    """Capitalize the first letter of every word, leave the rest alone."""
    return " ".join(word[:1].upper() + word[1:] for word in phrase.split(" "))


def detect_branch(lower_text: str) -> str:
    for branch, keywords in BRANCH_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return branch
    return ""


def detect_rank(lower_text: str) -> str:
    for pattern, rank in _RANK_PATTERNS:
        if pattern.search(lower_text):
            return rank
    return ""


def detect_mos_code(text: str) -> str:
    """Prefer a code on a line that mentions MOS/AFSC/rate, else the first code anywhere."""
    # Only "\n" separates lines; form feeds and other breaks stay inline
    for line in text.split("\n"):
        lower_line = line.lower()
        if any(keyword in lower_line for keyword in MOS_LINE_KEYWORDS):
            match = MOS_PATTERN.search(line)
            if match:
                return match.group(0)

    match = MOS_PATTERN.search(text)
    return match.group(0) if match else ""


def estimate_years_of_service(text: str) -> int:
    """Span between the earliest and latest year mentioned, if plausible."""
    years = [int(y) for y in YEAR_PATTERN.findall(text)]
    if len(years) < 2:
        return 0

    diff = max(years) - min(years)
    if 0 < diff < MAX_PLAUSIBLE_SERVICE_YEARS:
        return diff
    return 0


def detect_clearance(lower_text: str) -> str:
    # "top secret" contains "secret", so it goes first
    if "top secret" in lower_text or "ts/sci" in lower_text:
        return "Top Secret (TS/SCI)"
    if "secret" in lower_text:
        return "Secret"
    return "None"


def detect_leadership_role(lower_text: str) -> str:
    for role in LEADERSHIP_KEYWORDS:
        if role in lower_text:
            return _title_case(role)
    return ""


def detect_awards(lower_text: str) -> str:
    found = [_title_case(award) for award in AWARD_KEYWORDS if award in lower_text]
    return ", ".join(found)


def make_description(text: str) -> str:
    return re.sub(r"\s+", " ", text[:DESCRIPTION_LENGTH]).strip()


def extract_military_data(text: Optional[str]) -> MilitaryHistory:
    """
    Extract a military service record from raw document text.

    Never raises. Undetected fields keep their defaults
    ("" / 0 / "None").
    """
    text = text or ""
    lower_text = text.lower()

    return MilitaryHistory(
        branch=detect_branch(lower_text),
        rank=detect_rank(lower_text),
        mos_code=detect_mos_code(text),
        years_of_service=estimate_years_of_service(text),
        security_clearance=detect_clearance(lower_text),
        leadership_role=detect_leadership_role(lower_text),
        awards=detect_awards(lower_text),
        description=make_description(text),
    )


# ============================================================
# RESUME CONTENT GENERATION
# ============================================================

BASE_SKILLS = [
    "Leadership & Team Management",
    "Operational Planning",
    "Risk Assessment",
    "Adaptability under Pressure",
    "Cross-functional Communication",
]

BASE_EXPERIENCE = [
    "Managed operations and personnel in high-stress environments",
    "Maintained accountability of equipment valued at over $1M",
    "Mentored junior personnel and conducted training operations",
]


def _has_clearance(clearance: Optional[str]) -> bool:
    return bool(clearance) and clearance != "None"


def generate_resume_content(history: MilitaryHistory) -> GeneratedResumeContent:
    """
    Template-based civilian resume content from a military record.

    Deterministic: the same record always yields the same content.
    """
    branch = history.branch or "military"

    summary = f"Dedicated and disciplined {branch} veteran"
    if history.rank:
        summary += f" with experience as a {history.rank}"
        if history.mos_code:
            summary += f" ({history.mos_code})"
    summary += "."
    if history.leadership_role:
        summary += f" Proven leader having served as a {history.leadership_role}."
    if _has_clearance(history.security_clearance):
        summary += f" Holds Active {history.security_clearance} clearance."
    summary += (
        " Proven track record of leadership, adaptability, and mission accomplishment."
        " Eager to leverage military experience in a civilian role."
    )

    skills = list(BASE_SKILLS)
    skills.append(f"{branch} Specific Technical Skills")
    if _has_clearance(history.security_clearance):
        skills.append(f"Security Clearance: {history.security_clearance}")

    served = f"Served as {history.rank}" if history.rank else "Served"
    if history.branch:
        served += f" in the United States {history.branch}"
    experience = [served] + list(BASE_EXPERIENCE)

    if history.leadership_role:
        experience.append(
            f"Performed duties as {history.leadership_role}, overseeing team operations and welfare."
        )
    if history.awards:
        experience.append(f"Honors: {history.awards}")

    return GeneratedResumeContent(summary=summary, skills=skills, experience=experience)


# ============================================================
# RESUME BUILDER SERVICE
# ============================================================

class ResumeBuilderService:
    """
    Complete resume creation workflow:
    1. Generate content from the military history
    2. Store the resume in MongoDB for the user
    """

    def __init__(self):
        self.resume_service = ResumeService()

    def create_resume(
        self,
        user: dict,
        history: MilitaryHistory,
        title: Optional[str] = None,
        education: Optional[List[dict]] = None
    ) -> dict:
        content = generate_resume_content(history)
        resume = self.resume_service.insert(
            user_id=user["id"],
            title=title or f"{user.get('first_name', 'My')}'s Resume",
            military_history=history.model_dump(),
            education=education or [],
            generated_summary=content.summary,
            generated_skills=content.skills,
            generated_experience=content.experience,
        )
        logger.info("Resume %s created for user %s", resume["id"], user["id"])
        return resume


def get_resume_builder() -> ResumeBuilderService:
    """Get resume builder service instance."""
    return ResumeBuilderService()
