from typing import List, Literal, Optional
from pydantic import BaseModel, conint, constr


class CartAddRequest(BaseModel):
    menu_item_id: int
    quantity: conint(ge=1, le=99) = 1
    size: Optional[constr(strip_whitespace=True, min_length=1)] = None
    extras: List[constr(strip_whitespace=True, min_length=1)] = []


class CartQuantityRequest(BaseModel):
    quantity: conint(le=99)


class CheckoutRequest(BaseModel):
    customer_name: constr(strip_whitespace=True, min_length=1, max_length=100)
    customer_phone: Optional[constr(strip_whitespace=True, max_length=30)] = None
    notes: Optional[constr(max_length=1000)] = None
    payment_method_id: Optional[int] = None
    table_token: Optional[constr(strip_whitespace=True, max_length=64)] = None


class StatusChangeRequest(BaseModel):
    status: Optional[constr(strip_whitespace=True)] = None


class CustomerOrdersQuery(BaseModel):
    customer: constr(strip_whitespace=True, min_length=1, max_length=100)


class OrderListQuery(BaseModel):
    status: Optional[Literal["new", "preparing", "ready", "delivered", "cancelled"]] = None
    limit: conint(ge=1, le=500) = 100
