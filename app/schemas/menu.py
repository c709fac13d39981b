from typing import List, Literal, Optional
from pydantic import BaseModel, confloat, conint, constr


class MenuOption(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    price: confloat(ge=0) = 0
    type: Literal["size", "extra"] = "extra"


class MenuUpdateRequest(BaseModel):
    title: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    description: Optional[constr(max_length=500)] = None
    is_active: Optional[bool] = None


class CategoryRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    description: Optional[constr(max_length=500)] = None


class ReorderRequest(BaseModel):
    ids: List[int]


class MenuItemRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    description: Optional[constr(max_length=500)] = None
    price: confloat(ge=0)
    category_id: Optional[int] = None
    prep_time_minutes: conint(ge=1) = 15
    is_available: bool = True
    options: List[MenuOption] = []


class MenuItemUpdateRequest(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=2, max_length=100)] = None
    description: Optional[constr(max_length=500)] = None
    price: Optional[confloat(ge=0)] = None
    category_id: Optional[int] = None
    prep_time_minutes: Optional[conint(ge=1)] = None
    is_available: Optional[bool] = None
    options: Optional[List[MenuOption]] = None
