from typing import Optional
from pydantic import BaseModel, EmailStr, constr, field_validator
from zoneinfo import available_timezones

SLUG_PATTERN = r"^[a-z0-9-]+$"


class RestaurantBase(BaseModel):
    address: Optional[constr(strip_whitespace=True, min_length=5, max_length=200)] = None
    phone: Optional[constr(strip_whitespace=True, min_length=5, max_length=20)] = None
    email: Optional[EmailStr] = None
    timezone: str = "Africa/Maputo"
    currency: constr(strip_whitespace=True, min_length=3, max_length=3) = "MZN"

    @field_validator("address", "phone", "email", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value):
        if value not in available_timezones():
            raise ValueError("Unknown timezone")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value):
        return value.upper()


class CreateRestaurantRequest(RestaurantBase):
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    slug: constr(strip_whitespace=True, min_length=2, max_length=100, pattern=SLUG_PATTERN)


class UpdateRestaurantRequest(RestaurantBase):
    name: Optional[constr(strip_whitespace=True, min_length=2, max_length=100)] = None
    slug: Optional[constr(strip_whitespace=True, min_length=2, max_length=100, pattern=SLUG_PATTERN)] = None
    timezone: Optional[str] = None
    currency: Optional[constr(strip_whitespace=True, min_length=3, max_length=3)] = None

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value):
        if value is not None and value not in available_timezones():
            raise ValueError("Unknown timezone")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value):
        return value.upper() if value else value


class TableRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    is_active: bool = True


class PaymentMethodRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    is_enabled: bool = True


class PaymentMethodUpdateRequest(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    is_enabled: Optional[bool] = None
