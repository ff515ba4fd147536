"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from ..schemas import HealthResponse
from ..store import OrderStore, get_store

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(store: OrderStore = Depends(get_store)):
    """Check API health and store status."""
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        orders=len(store.list())
    )
