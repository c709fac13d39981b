from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, constr


class PermissionFlags(BaseModel):
    menu_editor: bool = True
    qr_codes: bool = True
    orders: bool = True
    kitchen: bool = True
    settings: bool = False
    reports: bool = True


class TeamMemberRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[constr(strip_whitespace=True, max_length=20)] = None
    password: constr(min_length=6, max_length=128)
    role: Literal["restaurant_admin", "staff"] = "staff"
    permissions: PermissionFlags = PermissionFlags()


class TeamPermissionsRequest(BaseModel):
    permissions: PermissionFlags
