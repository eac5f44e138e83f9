"""
Pydantic Schemas - Form Validation and Records

All form and record schemas in one file for simplicity.
Validation messages are in French, matching the UI.
"""

from pydantic import BaseModel, EmailStr, Field, ValidationError, ValidationInfo, field_validator
from typing import ClassVar, Dict, List, Optional
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "admin"
    job_seeker = "job-seeker"
    job_poster = "job-poster"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"


class JobStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"


JOB_TYPE_LABELS = {
    JobType.full_time.value: "CDI",
    JobType.part_time.value: "Temps partiel",
    JobType.contract.value: "CDD",
    JobType.internship.value: "Stage",
}

GOVERNORATES = [
    "Ariana", "Béja", "Ben Arous", "Bizerte", "Gabès", "Gafsa", "Jendouba",
    "Kairouan", "Kasserine", "Kébili", "Kef", "Mahdia", "Manouba", "Médenine",
    "Monastir", "Nabeul", "Sfax", "Sidi Bouzid", "Siliana", "Sousse",
    "Tataouine", "Tozeur", "Tunis", "Zaghouan",
]

INDUSTRIES = [
    "Agriculture & Foresterie",
    "Environnement",
    "Gestion des Ressources Naturelles",
    "Conservation",
    "Recherche & Développement",
    "Éducation & Formation",
    "Commerce de Bois",
    "Papeterie",
    "Agroalimentaire",
    "Autre",
]


# ============================================================
# FORM HELPERS
# ============================================================

REQUIRED = "Ce champ est requis"
INVALID_EMAIL = "Adresse e-mail invalide"
PASSWORD_TOO_SHORT = "Le mot de passe doit contenir au moins 8 caractères"


class FormModel(BaseModel):
    """Base for HTML forms. `messages` overrides the error text per field."""
    messages: ClassVar[Dict[str, str]] = {}
    # Sent to the backend exactly as typed
    unstripped: ClassVar[frozenset] = frozenset({"password", "confirm_password"})

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v, info: ValidationInfo):
        if info.field_name in cls.unstripped:
            return v
        return v.strip() if isinstance(v, str) else v


def form_errors(exc: ValidationError, model: type = FormModel) -> Dict[str, str]:
    """Flatten a ValidationError into {field: first message}."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "form"
        if field in errors:
            continue
        custom = (err.get("ctx") or {}).get("error")
        if field in model.messages:
            errors[field] = model.messages[field]
        elif custom is not None:
            errors[field] = str(custom)
        else:
            errors[field] = err["msg"]
    return errors


def _must_match_password(v: str, info: ValidationInfo) -> str:
    password = info.data.get("password")
    if password is not None and v != password:
        raise ValueError("Les mots de passe ne correspondent pas")
    return v


def _must_agree(v: bool) -> bool:
    if not v:
        raise ValueError("Vous devez accepter les conditions d'utilisation")
    return v


# ============================================================
# AUTH SCHEMAS
# ============================================================

class SignInForm(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "email": INVALID_EMAIL,
        "password": PASSWORD_TOO_SHORT,
    }

    email: EmailStr
    password: str = Field(..., min_length=8)
    remember_me: bool = False


class JobSeekerSignUp(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "first_name": "Le prénom doit contenir au moins 2 caractères",
        "last_name": "Le nom doit contenir au moins 2 caractères",
        "email": INVALID_EMAIL,
        "password": PASSWORD_TOO_SHORT,
        "location": "Veuillez sélectionner votre gouvernorat",
    }

    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str
    location: str = Field(..., min_length=1)
    skills: Optional[str] = None
    education: Optional[str] = None
    agree_terms: bool = False

    check_confirm = field_validator("confirm_password")(_must_match_password)
    check_terms = field_validator("agree_terms")(_must_agree)

    def metadata(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "user_type": UserRole.job_seeker.value,
            "location": self.location,
        }


class JobPosterSignUp(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "company_name": "Le nom de l'entreprise doit contenir au moins 2 caractères",
        "contact_name": "Le nom du contact doit contenir au moins 2 caractères",
        "email": INVALID_EMAIL,
        "password": PASSWORD_TOO_SHORT,
        "location": "Veuillez sélectionner votre gouvernorat",
        "industry": "Veuillez sélectionner votre secteur d'activité",
        "phone": "Le numéro de téléphone doit contenir au moins 8 chiffres",
    }

    company_name: str = Field(..., min_length=2)
    contact_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str
    location: str = Field(..., min_length=1)
    industry: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=8)
    agree_terms: bool = False

    check_confirm = field_validator("confirm_password")(_must_match_password)
    check_terms = field_validator("agree_terms")(_must_agree)

    def metadata(self) -> dict:
        # The contact person is the account holder; the company takes the last-name slot
        return {
            "first_name": self.contact_name,
            "last_name": self.company_name,
            "user_type": UserRole.job_poster.value,
            "location": self.location,
            "phone": self.phone,
            "industry": self.industry,
        }


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobDetailsStep(FormModel):
    """Post-job wizard, step 1."""
    messages: ClassVar[Dict[str, str]] = {
        "title": REQUIRED,
        "company": REQUIRED,
        "location": REQUIRED,
        "type": "Veuillez choisir un type de contrat",
    }

    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    type: JobType
    salary: Optional[str] = None


class JobDescriptionStep(FormModel):
    """Post-job wizard, step 2."""
    messages: ClassVar[Dict[str, str]] = {
        "description": REQUIRED,
        "requirements": REQUIRED,
    }

    description: str = Field(..., min_length=1)
    requirements: str = Field(..., min_length=1)


class JobCreate(JobDetailsStep, JobDescriptionStep):
    messages: ClassVar[Dict[str, str]] = {**JobDetailsStep.messages, **JobDescriptionStep.messages}


class JobApplicationForm(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "full_name": "Le nom doit contenir au moins 2 caractères",
        "email": INVALID_EMAIL,
        "phone": "Le numéro de téléphone doit contenir au moins 8 chiffres",
        "cover_letter": "La lettre de motivation doit contenir au moins 10 caractères",
    }

    full_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=8)
    cover_letter: str = Field(..., min_length=10)


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileSettingsForm(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "first_name": "Le prénom est requis",
        "last_name": "Le nom est requis",
    }

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    title: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None


class ExperienceEntry(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "title": REQUIRED,
        "company": REQUIRED,
        "start_date": REQUIRED,
    }

    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    start_date: str = Field(..., min_length=1)
    end_date: Optional[str] = None
    description: Optional[str] = None


class EducationEntry(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "degree": REQUIRED,
        "institution": REQUIRED,
    }

    id: Optional[str] = None
    degree: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    location: Optional[str] = None
    year: Optional[str] = None


# ============================================================
# FEEDBACK SCHEMAS
# ============================================================

class FeedbackCreate(FormModel):
    messages: ClassVar[Dict[str, str]] = {
        "rating": "Veuillez donner une note",
        "message": "Veuillez écrire un message",
    }

    rating: int = Field(..., ge=1, le=5)
    message: str = Field(..., min_length=1)


class FeedbackItem(BaseModel):
    id: str
    rating: int
    message: str
    name: str
    role: str
    date: str
    avatar: str


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class AdminStats(BaseModel):
    total_users: int = 0
    total_jobs: int = 0
    active_jobs: int = 0
    total_applications: int = 0
    new_users_this_month: int = 0
    new_jobs_this_month: int = 0

    @property
    def active_percentage(self) -> int:
        if not self.total_jobs:
            return 0
        return round(self.active_jobs / self.total_jobs * 100)


class AdminUserRow(BaseModel):
    id: str
    name: str
    email: str = ""
    type: str
    status: str = UserStatus.active.value
    created_at: Optional[datetime] = None


# ============================================================
# PRICING
# ============================================================

class PricingPlan(BaseModel):
    title: str
    price: str
    features: List[str]
    is_most_popular: bool = False
    button_text: str = "Acheter le Plan"
