"""
Order payloads exchanged with the orders API.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class CustomerSummary(BaseModel):
    """Customer fields embedded in an order."""
    id: Optional[int] = None
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderItem(BaseModel):
    """Single certificate line of an order."""
    id: int
    certificate_id: int
    certificate_name: str = ""
    price: float = 0.0
    quantity: int = 1
    status: OrderStatus = OrderStatus.PENDING
    certificate_data: Any = None


class Order(BaseModel):
    """Order as returned by the API. `total_amount` is never recomputed here."""
    id: int
    user_id: int
    total_amount: float = 0.0
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    tracking_code: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    user: Optional[CustomerSummary] = None

    @property
    def customer_name(self) -> str:
        return self.user.name if self.user else ""

    def find_item(self, item_id: int) -> Optional[OrderItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class CertificateItemCreate(BaseModel):
    certificate_id: int
    quantity: int = Field(default=1, ge=1)
    price: Optional[float] = None
    certificate_data: Any = None


class OrderCreate(BaseModel):
    """Request body for POST /orders."""
    user_id: int
    certificate_items: List[CertificateItemCreate] = Field(min_length=1)
    notes: Optional[str] = None
