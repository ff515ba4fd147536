"""
Login endpoint (sandbox). Any password works for the demo customers.
"""

import uuid

from fastapi import APIRouter, HTTPException

from ..schemas import SessionCreate, SessionResponse
from ..store import DEMO_CUSTOMERS

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=SessionResponse)
async def create_session(data: SessionCreate):
    for customer in DEMO_CUSTOMERS.values():
        if customer.email == data.email.lower() and data.password:
            return SessionResponse(user=customer, token=f"sandbox-{uuid.uuid4().hex}")
    raise HTTPException(status_code=401, detail="Credenciais inválidas")
