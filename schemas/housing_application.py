from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from email_validator import validate_email, EmailNotValidError

from models.housing_application import (
    GOVERNORATES,
    HOUSING_TYPES,
    EMPLOYMENT_STATUSES,
    APPLICATION_STATUSES,
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class HousingApplicationCreate(BaseModel):
    full_name: str = Field(..., alias="fullName")
    email: str
    phone: Optional[str] = None
    governorate: str
    housing_type: str = Field(..., alias="housingType")
    family_size: Optional[int] = Field(None, alias="familySize")
    employment_status: Optional[str] = Field(None, alias="employmentStatus")
    message: Optional[str] = None

    class Config:
        validate_by_name = True

    @field_validator("phone", "employment_status", "message", "family_size", mode="before")
    @classmethod
    def empty_is_missing(cls, value):
        return _blank_to_none(value)

    @field_validator("full_name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name is required")
        if len(value) > 100:
            raise ValueError("Name must be at most 100 characters")
        return value

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        value = value.strip()
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Valid email is required")
        return value

    @field_validator("governorate")
    @classmethod
    def known_governorate(cls, value: str) -> str:
        if value not in GOVERNORATES:
            raise ValueError("Please select a governorate")
        return value

    @field_validator("housing_type")
    @classmethod
    def known_housing_type(cls, value: str) -> str:
        if value not in HOUSING_TYPES:
            raise ValueError("Please select housing type")
        return value

    @field_validator("family_size")
    @classmethod
    def positive_family_size(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("Family size must be at least 1")
        return value

    @field_validator("employment_status")
    @classmethod
    def known_employment_status(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in EMPLOYMENT_STATUSES:
            raise ValueError("Please select an employment status")
        return value

    @field_validator("message")
    @classmethod
    def message_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) > 1000:
            raise ValueError("Message must be at most 1000 characters")
        return value


class HousingApplicationDTO(BaseModel):
    id: int
    full_name: str = Field(..., alias="fullName")
    email: str
    phone: Optional[str] = None
    governorate: str
    housing_type: str = Field(..., alias="housingType")
    family_size: Optional[int] = Field(None, alias="familySize")
    employment_status: Optional[str] = Field(None, alias="employmentStatus")
    message: Optional[str] = None
    status: str
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        validate_by_name = True
        from_attributes = True


class ApplicationStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, value: str) -> str:
        if value not in APPLICATION_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(APPLICATION_STATUSES)}")
        return value


class ApplicationOptions(BaseModel):
    governorates: List[str]
    housing_types: List[str] = Field(..., alias="housingTypes")
    employment_statuses: List[str] = Field(..., alias="employmentStatuses")

    class Config:
        validate_by_name = True


class DashboardStats(BaseModel):
    total_applications: int = Field(..., alias="totalApplications")
    registered_users: int = Field(..., alias="registeredUsers")
    pending_applications: int = Field(..., alias="pendingApplications")

    class Config:
        validate_by_name = True
