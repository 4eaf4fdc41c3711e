"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Also holds the plain value types used by the match scorer and the
military resume extractor.
"""

import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    veteran = "veteran"
    employer = "employer"
    admin = "admin"


class AuthProvider(str, Enum):
    local = "local"
    google = "google"
    linkedin = "linkedin"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    remote = "Remote"
    internship = "Internship"


class WorkMode(str, Enum):
    on_site = "On-site"
    remote = "Remote"
    hybrid = "Hybrid"


class ApplicationStatus(str, Enum):
    applied = "applied"
    reviewing = "reviewing"
    interviewing = "interviewing"
    rejected = "rejected"
    accepted = "accepted"


class CompanySize(str, Enum):
    tiny = "1-10"
    small = "11-50"
    medium = "51-200"
    large = "201-500"
    very_large = "501-1000"
    enterprise = "1000+"


class StoryStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class PartnerType(str, Enum):
    education = "education"
    government = "government"
    corporate = "corporate"
    other = "other"


class InquiryStatus(str, Enum):
    new = "new"
    contacted = "contacted"
    partnered = "partnered"
    rejected = "rejected"


WEBSITE_PATTERN = re.compile(
    r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)"
)


def _check_website(value: Optional[str]) -> Optional[str]:
    if value and not WEBSITE_PATTERN.match(value):
        raise ValueError("Please use a valid URL with http or https")
    return value


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    terms_accepted: bool = False
    military_branch: Optional[str] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None

    @field_validator("role")
    @classmethod
    def no_self_registered_admins(cls, value: UserRole) -> UserRole:
        if value == UserRole.admin:
            raise ValueError("Admin accounts cannot be self-registered")
        return value

    @field_validator("company_website")
    @classmethod
    def valid_website(cls, value: Optional[str]) -> Optional[str]:
        return _check_website(value)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class AuthResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    company_id: Optional[str] = None
    token: str
    token_type: str = "bearer"

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=6)

class ResetPasswordResponse(BaseModel):
    success: bool = True
    token: str


# ============================================================
# USER / PERSONA SCHEMAS
# ============================================================

class Location(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None

class Persona(BaseModel):
    """Veteran profile used for job matching."""
    role: Optional[str] = None
    years_of_service: Optional[str] = None
    skills: List[str] = []
    goals: Optional[str] = None
    bio: Optional[str] = None
    mos_code: Optional[str] = None
    security_clearance: Optional[str] = None
    current_location: Optional[Location] = None

class CompanyProfile(BaseModel):
    website: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    size: Optional[str] = None
    logo: Optional[str] = None

class ProfileUpdate(BaseModel):
    persona: Optional[Persona] = None
    company_profile: Optional[CompanyProfile] = None

class UserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    auth_provider: str = AuthProvider.local.value
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    military_branch: Optional[str] = None
    persona: Optional[Persona] = None
    company_profile: Optional[CompanyProfile] = None
    terms_accepted: bool = False
    created_at: Optional[datetime] = None

class PublicUserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    role: str


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    industry: str = Field(..., min_length=1)
    website: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    size: Optional[CompanySize] = None
    logo: Optional[str] = None

    @field_validator("website")
    @classmethod
    def valid_website(cls, value: Optional[str]) -> Optional[str]:
        return _check_website(value)

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    industry: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    size: Optional[CompanySize] = None
    logo: Optional[str] = None

    @field_validator("website")
    @classmethod
    def valid_website(cls, value: Optional[str]) -> Optional[str]:
        return _check_website(value)

class CompanyResponse(BaseModel):
    id: str
    name: str
    industry: str
    website: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    size: Optional[str] = None
    logo: Optional[str] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class JoinCompanyRequest(BaseModel):
    company_id: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class SalaryRange(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: str = "USD"

class WorkExperience(BaseModel):
    min: int = Field(0, ge=0)
    max: Optional[int] = Field(None, ge=0)

class VeteranPreferences(BaseModel):
    security_clearance: Optional[str] = None
    military_branch: Optional[str] = None
    mos_codes: List[str] = []
    rank_category: Optional[str] = None

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    type: JobType = JobType.full_time
    work_mode: WorkMode = WorkMode.on_site
    salary_range: Optional[SalaryRange] = None
    work_experience: Optional[WorkExperience] = None
    education_level: Optional[str] = None
    education_field: Optional[str] = None
    key_skills: List[str] = []
    openings: int = Field(1, ge=1)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    description: str = Field(..., min_length=1)
    responsibilities: List[str] = []
    requirements: List[str] = []
    veteran_preferences: Optional[VeteranPreferences] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return value.strip()

class JobUpdate(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    work_mode: Optional[WorkMode] = None
    salary_range: Optional[SalaryRange] = None
    work_experience: Optional[WorkExperience] = None
    education_level: Optional[str] = None
    education_field: Optional[str] = None
    key_skills: Optional[List[str]] = None
    openings: Optional[int] = Field(None, ge=1)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None
    responsibilities: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    veteran_preferences: Optional[VeteranPreferences] = None
    is_active: Optional[bool] = None

class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    location: str
    type: str
    work_mode: str = WorkMode.on_site.value
    salary_range: Optional[SalaryRange] = None
    work_experience: Optional[WorkExperience] = None
    education_level: Optional[str] = None
    education_field: Optional[str] = None
    key_skills: List[str] = []
    openings: int = 1
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    description: str
    responsibilities: List[str] = []
    requirements: List[str] = []
    veteran_preferences: Optional[VeteranPreferences] = None
    posted_by: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# MATCHING SCHEMAS
# Plain inputs/outputs of the match scorer (no persistence)
# ============================================================

class JobMatchCriteria(BaseModel):
    """The part of a job posting the scorer looks at."""
    job_id: Optional[str] = None
    mos_codes: List[str] = []
    security_clearance: Optional[str] = "None"
    key_skills: List[str] = []
    city: Optional[str] = None
    state: Optional[str] = None

class CandidateMatchProfile(BaseModel):
    """The part of a veteran persona the scorer looks at."""
    mos_code: Optional[str] = None
    security_clearance: Optional[str] = "None"
    skills: List[str] = []
    city: Optional[str] = None
    state: Optional[str] = None

class MatchDetails(BaseModel):
    mos_match: bool = False
    skill_match_count: int = 0

class MatchResult(BaseModel):
    score: int = Field(0, ge=0, le=100)
    details: MatchDetails = MatchDetails()

class JobMatchResponse(BaseModel):
    job_id: str
    title: str
    company: str
    location: str
    type: str
    salary_range: Optional[SalaryRange] = None
    posted_at: Optional[datetime] = None
    score: int
    match_details: MatchDetails


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationResponse(BaseModel):
    id: str
    job: str
    applicant: str
    status: str
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ApplicationJobSummary(BaseModel):
    id: str
    title: str
    company: str
    location: str
    type: str

class MyApplicationResponse(ApplicationResponse):
    job_summary: Optional[ApplicationJobSummary] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class MilitaryHistory(BaseModel):
    """
    Military service record. Produced by the resume extractor and stored
    on resumes. Empty string / 0 / "None" mean "not detected".
    """
    branch: str = ""
    rank: str = ""
    mos_code: str = ""
    years_of_service: int = Field(0, ge=0)
    security_clearance: str = "None"
    leadership_role: str = ""
    awards: str = ""
    description: str = ""

class Education(BaseModel):
    school: str
    degree: str
    field_of_study: Optional[str] = None
    graduation_year: Optional[str] = None

class GeneratedResumeContent(BaseModel):
    summary: str
    skills: List[str]
    experience: List[str]

class ResumeCreate(BaseModel):
    military_history: MilitaryHistory
    title: Optional[str] = None
    education: List[Education] = []

class ResumeUpdate(BaseModel):
    title: Optional[str] = None
    military_history: Optional[MilitaryHistory] = None
    education: Optional[List[Education]] = None
    generated_summary: Optional[str] = None
    generated_skills: Optional[List[str]] = None
    generated_experience: Optional[List[str]] = None
    file_url: Optional[str] = None

class ResumeResponse(BaseModel):
    id: str
    user: str
    title: str
    military_history: MilitaryHistory
    education: List[Education] = []
    generated_summary: str = ""
    generated_skills: List[str] = []
    generated_experience: List[str] = []
    file_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ResumeSummary(BaseModel):
    """Latest resume attached to candidate and applicant listings."""
    title: str
    summary: str = ""
    skills: List[str] = []
    experience: List[str] = []
    military_history: MilitaryHistory

class ResumeParseResponse(BaseModel):
    success: bool = True
    filename: Optional[str] = None
    data: MilitaryHistory


# ============================================================
# CANDIDATE / APPLICANT LISTINGS
# ============================================================

class CandidateResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    military_branch: Optional[str] = None
    location: Optional[str] = None
    persona: Optional[Persona] = None
    resume: Optional[ResumeSummary] = None

class ApplicantResponse(ApplicationResponse):
    applicant_profile: Optional[CandidateResponse] = None


# ============================================================
# MESSAGING SCHEMAS
# ============================================================

class ChatMessageCreate(BaseModel):
    recipient_id: str
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message content is required")
        return value

class ChatMessageResponse(BaseModel):
    id: str
    sender: str
    recipient: str
    content: str
    read: bool = False
    created_at: Optional[datetime] = None

class ConversationPartner(BaseModel):
    id: str
    first_name: str
    last_name: str
    role: str

class LastMessage(BaseModel):
    content: str
    created_at: Optional[datetime] = None
    read: bool = False
    sender: str

class ConversationResponse(BaseModel):
    user: ConversationPartner
    last_message: LastMessage

class UnreadCountResponse(BaseModel):
    count: int


# ============================================================
# SUCCESS STORY SCHEMAS
# ============================================================

class StoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    military_branch: str = Field(..., min_length=1)
    current_role: str = Field(..., min_length=1)

class StoryResponse(BaseModel):
    id: str
    user: str
    author_name: Optional[str] = None
    title: str
    content: str
    military_branch: str
    current_role: str
    status: str
    created_at: Optional[datetime] = None


# ============================================================
# PARTNER INQUIRY SCHEMAS
# ============================================================

class PartnerInquiryCreate(BaseModel):
    organization_name: str = Field(..., min_length=1)
    contact_name: str = Field(..., min_length=1)
    email: EmailStr
    type: PartnerType
    message: str = Field(..., min_length=1)

class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus

class PartnerInquiryResponse(BaseModel):
    id: str
    organization_name: str
    contact_name: str
    email: str
    type: str
    message: str
    status: str
    created_at: Optional[datetime] = None


# ============================================================
# SAVED CANDIDATE SCHEMAS
# ============================================================

class SavedCandidateCreate(BaseModel):
    candidate_id: str
    job_id: Optional[str] = None
    notes: Optional[str] = None

class SavedCandidateResponse(BaseModel):
    id: str
    employer: str
    candidate: str
    job: Optional[str] = None
    notes: Optional[str] = None
    candidate_profile: Optional[CandidateResponse] = None
    created_at: Optional[datetime] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
