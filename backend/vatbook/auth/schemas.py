import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from vatbook.tax.vat_validator import clean_vat_number, is_valid_vat_format


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=150)
    password: str = Field(min_length=8, max_length=128)
    company_name: str = Field(min_length=1, max_length=255)
    vat_number: str

    @field_validator("vat_number")
    @classmethod
    def normalize_vat_number(cls, value: str) -> str:
        if not is_valid_vat_format(value):
            raise ValueError("Invalid Belgian VAT number format. Should be 10 digits")
        return clean_vat_number(value)


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    company_name: str
    vat_number: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    company_name: str | None = Field(None, min_length=1, max_length=255)
    password: str | None = Field(None, min_length=8, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefreshRequest(BaseModel):
    refresh_token: str
