from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, constr


class RoleRequest(BaseModel):
    role: Literal["super_admin", "restaurant_admin", "staff"]


class UserRestaurantsRequest(BaseModel):
    restaurant_ids: List[int]


class PlatformSettingsRequest(BaseModel):
    platform_name: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    support_email: Optional[EmailStr] = None
    enable_registration: Optional[bool] = None
    require_email_verification: Optional[bool] = None
    maintenance_mode: Optional[bool] = None
