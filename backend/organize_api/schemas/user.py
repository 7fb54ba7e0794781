"""
Pydantic schemas validating user input before it reaches the service layer.

The GraphQL input types carry raw strings; these models hold the rules
(non-empty names, a well-formed e-mail address) in one place. E-mail
addresses are lower-cased here, so uniqueness and login ignore their casing;
usernames keep the casing the user chose.
"""

from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from organize_api.core.errors import ValidationError


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    # Carries the raw secret; the service replaces it with a hash
    password_hash: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.lower() if value is not None else value


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=255)
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.lower() if value is not None else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.lower() if value is not None else value


def parse_input(schema: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    """Validate data against a schema, reporting failures as ValidationError."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        raise ValidationError(f"Invalid value for: {', '.join(fields)}") from e
