import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


class UserCreate(BaseModel):
    username: str = Field(min_length=3)
    fullname: str = Field(min_length=3)
    email: EmailStr
    password: str
    role: str
    location: Optional[str] = None
    bio: Optional[str] = None

    # Role-specific fields, see ROLE_PROFILE_MODELS
    sector: Optional[str] = None
    professional_email: Optional[EmailStr] = Field(default=None, alias="professionalEmail")
    founded_year: Optional[int] = Field(default=None, alias="foundedYear")
    verification_document_url: Optional[str] = Field(default=None, alias="verificationDocumentUrl")
    university_name: Optional[str] = Field(default=None, alias="universityName")
    official_email: Optional[EmailStr] = Field(default=None, alias="officialUniversityEmail")

    class Config:
        populate_by_name = True

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not re.search(r"[A-Z]", value):
            raise ValueError("Password must contain an uppercase letter")
        if not re.search(r"[0-9]", value):
            raise ValueError("Password must contain a digit")
        if not re.search(r"[!@#$%^&*]", value):
            raise ValueError("Password must contain a special character (!@#$%^&*)")
        return value


class EntrepreneurProfile(BaseModel):
    sector: str


class ProfessionalProfile(BaseModel):
    professional_email: Optional[str] = None
    sector: Optional[str] = None
    founded_year: Optional[int] = None
    verification_document_url: Optional[str] = None


class UniversityProfile(BaseModel):
    university_name: str
    official_email: str


ROLE_PROFILE_MODELS = {
    "entrepreneur": EntrepreneurProfile,
    "investor": ProfessionalProfile,
    "startup": ProfessionalProfile,
    "organisation": ProfessionalProfile,
    "university": UniversityProfile,
}


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(alias="verificationCode")

    class Config:
        populate_by_name = True


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(alias="refreshToken")

    class Config:
        populate_by_name = True


class UserSummary(BaseModel):
    id: int
    username: str
    fullname: str
    email: str
    profile_image: Optional[str]
    role: str

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    bio: Optional[str]
    location: Optional[str]
    profile: Optional[dict]
    is_verified: bool
    created_at: datetime


class PublicUserResponse(BaseModel):
    id: int
    username: str
    fullname: str
    profile_image: Optional[str]
    role: str
    bio: Optional[str]
    location: Optional[str]
    profile: Optional[dict]

    class Config:
        from_attributes = True


class AccountUpdateRequest(BaseModel):
    fullname: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    profile_image: Optional[str] = Field(default=None, alias="profileImage")

    class Config:
        populate_by_name = True
