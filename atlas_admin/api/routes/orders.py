"""
Order API endpoints (sandbox).
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..schemas import ItemStatusUpdate, OrderUpdate
from ..store import OrderStore, get_store
from ...orders.models import Order, OrderCreate, OrderItem

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_or_404(store: OrderStore, order_id: int) -> Order:
    order = store.get(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Pedido {order_id} não encontrado")
    return order


@router.get("", response_model=List[Order])
async def list_orders(store: OrderStore = Depends(get_store)):
    """All orders (admin listing)."""
    return store.list()


@router.get("/user/{user_id}", response_model=List[Order])
async def list_user_orders(user_id: int, store: OrderStore = Depends(get_store)):
    return store.list_for_user(user_id)


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: int, store: OrderStore = Depends(get_store)):
    return _order_or_404(store, order_id)


@router.post("", response_model=Order, status_code=201)
async def create_order(data: OrderCreate, store: OrderStore = Depends(get_store)):
    return store.create(data)


@router.put("/{order_id}", response_model=Order)
@router.patch("/{order_id}", response_model=Order)
async def update_order(order_id: int, data: OrderUpdate, store: OrderStore = Depends(get_store)):
    """
    Set status and/or payment status. Any transition is accepted.
    """
    _order_or_404(store, order_id)
    if data.status is None and data.payment_status is None:
        raise HTTPException(status_code=422, detail="Nada para atualizar")
    return store.update(order_id, status=data.status, payment_status=data.payment_status)


@router.put("/{order_id}/items/{item_id}", response_model=OrderItem)
async def update_item_status(
    order_id: int,
    item_id: int,
    data: ItemStatusUpdate,
    store: OrderStore = Depends(get_store)
):
    order = _order_or_404(store, order_id)
    if order.find_item(item_id) is None:
        raise HTTPException(status_code=404, detail=f"Item {item_id} não pertence ao pedido {order_id}")
    return store.update_item(order_id, item_id, data.status)
