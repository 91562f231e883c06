from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

PASSWORD_MIN_LENGTH = 6


class CreatePasswordRequest(BaseModel):
    password: str
    confirm_password: str = Field(..., alias="confirmPassword")
    country: Optional[str] = None

    class Config:
        validate_by_name = True

    @field_validator("password", "confirm_password")
    @classmethod
    def long_enough(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError("Password must be at least 6 characters")
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("password")
    @classmethod
    def required(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class ProfileDTO(BaseModel):
    public_id: str = Field(..., alias="publicId")
    email: str
    full_name: Optional[str] = Field(None, alias="fullName")
    country: Optional[str] = None
    role: str
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        validate_by_name = True
        from_attributes = True


class AuthResponse(BaseModel):
    access_token: str = Field(..., alias="accessToken")
    token_type: str = Field("bearer", alias="tokenType")
    user: ProfileDTO

    class Config:
        validate_by_name = True
