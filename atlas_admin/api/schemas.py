"""
Pydantic schemas for sandbox API requests and responses.
"""

from pydantic import BaseModel
from typing import Optional

from ..orders.models import CustomerSummary, OrderStatus, PaymentStatus


class OrderUpdate(BaseModel):
    """Partial order update (PUT and PATCH /orders/{id})."""
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None


class ItemStatusUpdate(BaseModel):
    status: OrderStatus


class SessionCreate(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    user: CustomerSummary
    token: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    orders: int
