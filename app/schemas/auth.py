from typing import Optional
from pydantic import BaseModel, EmailStr, constr, model_validator


class SignUpRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    email: EmailStr
    password: constr(min_length=6, max_length=128)
    phone: Optional[constr(strip_whitespace=True, max_length=20)] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: constr(min_length=1, max_length=128)


class PasswordUpdateRequest(BaseModel):
    password: constr(min_length=6, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class PasswordRecoveryRequest(BaseModel):
    email: EmailStr


class PasswordResetRequest(BaseModel):
    token: constr(min_length=10, max_length=128)
    password: constr(min_length=6, max_length=128)
