"""Read-only order endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import EntityNotFoundError, PersistenceError
from storefront.infrastructure.api.dependencies import get_show_order_handler
from storefront.infrastructure.api.schemas import OrderOut

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    handler: ShowOrderHandler = Depends(get_show_order_handler),
):
    """Order with its frozen line snapshots and current status."""
    try:
        return OrderOut(**asdict(handler.handle(order_id)))
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
