"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Field-level form rules (password strength, name characters, description
length...) are enforced by the FormValidator factories in
jobportal.core.validation so clients get a field -> message map; the
schemas here only fix shapes and types.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    candidate = "candidate"
    recruiter = "recruiter"
    admin = "admin"


class EmploymentType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"
    freelance = "freelance"


class RemoteType(str, Enum):
    fully_remote = "fully-remote"
    hybrid = "hybrid"
    on_site = "on-site"


class JobStatus(str, Enum):
    draft = "draft"
    active = "active"
    closed = "closed"


class ResumeStatus(str, Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    interviewed = "interviewed"
    rejected = "rejected"
    hired = "hired"


class Proficiency(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    expert = "expert"


class ReferralStatus(str, Enum):
    pending = "pending"
    applied = "applied"
    hired = "hired"
    rejected = "rejected"


class PaymentPurpose(str, Enum):
    subscription = "subscription"
    featured_job = "featured_job"
    resume_template = "resume_template"
    premium_profile = "premium_profile"


class PaymentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    phone: Optional[str] = None
    role: UserRole = UserRole.candidate

class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    phone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    open_jobs: int = 0


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    company_id: int
    title: str = ""
    description: str = ""
    location: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = "INR"
    experience_level: Optional[str] = None
    employment_type: str = ""
    category: Optional[str] = None
    remote_type: str = RemoteType.on_site.value
    application_deadline: Optional[datetime] = None
    skills: List[str] = []

class JobUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    experience_level: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    category: Optional[str] = None
    remote_type: Optional[RemoteType] = None
    application_deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None

class JobResponse(BaseModel):
    id: int
    company_id: int
    company_name: Optional[str] = None
    posted_by_recruiter_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str = "INR"
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    category: Optional[str] = None
    remote_type: Optional[str] = None
    is_remote: bool = False
    status: str = "active"
    application_deadline: Optional[datetime] = None
    skills: List[str] = []
    created_at: Optional[datetime] = None

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    limit: int
    pages: int


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    resume_id: Optional[int] = None
    cover_letter: Optional[str] = Field(None, max_length=1000)

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationResponse(BaseModel):
    id: int
    job_id: int
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    candidate_id: int
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    resume_id: Optional[int] = None
    cover_letter: Optional[str] = None
    status: str
    applied_at: Optional[datetime] = None

class ApplicationStats(BaseModel):
    total: int
    new_last_7_days: int
    by_status: Dict[str, int]


# ============================================================
# RESUME SCHEMAS
# ============================================================

class ResumeSkill(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    proficiency: Proficiency = Proficiency.intermediate

class ResumeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    template: str = "modern"
    resume_data: Dict[str, Any] = {}
    is_public: bool = False
    skills: List[ResumeSkill] = []

class ResumeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    template: Optional[str] = None
    status: Optional[ResumeStatus] = None
    resume_data: Optional[Dict[str, Any]] = None
    is_public: Optional[bool] = None
    skills: Optional[List[ResumeSkill]] = None

class ResumeResponse(BaseModel):
    id: int
    user_id: int
    title: str
    template: Optional[str] = None
    status: Optional[str] = None
    resume_data: Dict[str, Any] = {}
    is_public: bool = False
    skills: List[ResumeSkill] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ResumeTemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_premium: bool = False


# ============================================================
# REFERRAL SCHEMAS
# ============================================================

class ReferralCreate(BaseModel):
    job_id: int
    referred_email: str = ""
    referred_name: Optional[str] = None

class ReferralStatusUpdate(BaseModel):
    status: ReferralStatus

class ReferralResponse(BaseModel):
    id: int
    referrer_id: int
    referrer_name: Optional[str] = None
    job_id: int
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    referred_email: str
    referred_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

class ReferralStats(BaseModel):
    total: int
    by_status: Dict[str, int]


# ============================================================
# PAYMENT SCHEMAS
# ============================================================

class PaymentCreate(BaseModel):
    user_id: int
    amount: float = Field(..., ge=0)
    currency: str = "USD"
    purpose: PaymentPurpose
    reference: Optional[str] = Field(None, max_length=100)

class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus

class PaymentResponse(BaseModel):
    id: int
    user_id: int
    user_email: Optional[str] = None
    amount: float
    currency: str
    purpose: str
    status: str
    reference: Optional[str] = None
    created_at: Optional[datetime] = None

class PaymentStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    revenue: Dict[str, float]
    refunded: Dict[str, float]


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class DashboardStats(BaseModel):
    total_users: int
    candidates: int
    recruiters: int
    companies: int
    total_jobs: int
    active_jobs: int
    total_applications: int
    new_applications: int
    total_referrals: int
    revenue: float

class PipelineStats(BaseModel):
    job_id: int
    title: str
    pending: int = 0
    reviewed: int = 0
    shortlisted: int = 0
    interviewed: int = 0
    rejected: int = 0
    hired: int = 0

class JobListingStats(BaseModel):
    id: int
    title: str
    company_name: str
    location: Optional[str] = None
    application_count: int = 0
    created_at: Optional[datetime] = None

class TableHealth(BaseModel):
    table_name: str
    live_rows: int = 0
    dead_rows: int = 0
    last_vacuum: Optional[datetime] = None
    last_autovacuum: Optional[datetime] = None
    last_analyze: Optional[datetime] = None
    last_autoanalyze: Optional[datetime] = None


# ============================================================
# COMMON
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
