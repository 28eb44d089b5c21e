"""Store, purchase, spending, inventory and shopping list endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_journal.api.auth import current_user_id, get_container, require_api_token
from nutrition_journal.api.models import (
    InventoryCreate,
    InventoryUpdate,
    PurchaseCreate,
    PurchasedUpdate,
    ShoppingItemCreate,
    StoreCreate,
    StoreUpdate,
)
from nutrition_journal.domain.grocery import InventoryItem, SpendingPeriod
from nutrition_journal.services.grocery import is_low_stock

router = APIRouter(tags=["grocery"], dependencies=[Depends(require_api_token)])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/stores")
def list_stores(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    stores = get_container(request).store_service.list_stores(user_id)
    return {"stores": jsonable_encoder(stores)}


@router.post("/stores", status_code=status.HTTP_201_CREATED)
def create_store(
    body: StoreCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    store = get_container(request).store_service.create_store(user_id, body.model_dump())
    return jsonable_encoder(store)


@router.patch("/stores/{store_id}")
def update_store(
    store_id: UUID,
    body: StoreUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    store = get_container(request).store_service.update_store(
        user_id, store_id, body.model_dump(exclude_unset=True)
    )
    if store is None:
        raise _not_found()
    return jsonable_encoder(store)


@router.delete("/stores/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_store(
    store_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    if not get_container(request).store_service.delete_store(user_id, store_id):
        raise _not_found()


@router.get("/purchases")
def list_purchases(
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return purchases, newest first, optionally within a date range."""
    purchases = get_container(request).purchase_service.list_purchases(
        user_id, start, end
    )
    return {"purchases": jsonable_encoder(purchases)}


@router.post("/purchases", status_code=status.HTTP_201_CREATED)
def create_purchase(
    body: PurchaseCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Record a grocery purchase."""
    purchase = get_container(request).purchase_service.create_purchase(
        user_id, body.model_dump()
    )
    return jsonable_encoder(purchase)


@router.delete("/purchases/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(
    purchase_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    if not get_container(request).purchase_service.delete_purchase(user_id, purchase_id):
        raise _not_found()


@router.get("/spending")
def spending_summary(
    request: Request,
    period: SpendingPeriod = SpendingPeriod.MONTH,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return total, count and average spend with category and store breakdowns."""
    summary = get_container(request).purchase_service.spending_summary(user_id, period)
    return jsonable_encoder(summary)


@router.get("/inventory")
def list_inventory(
    request: Request,
    low_stock: bool = False,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return tracked stock; ``low_stock`` keeps only items under their threshold."""
    inventory = get_container(request).inventory_service
    items = inventory.low_stock(user_id) if low_stock else inventory.list_items(user_id)
    return {"items": [_serialize_inventory(item) for item in items]}


@router.post("/inventory", status_code=status.HTTP_201_CREATED)
def add_inventory_item(
    body: InventoryCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    item = get_container(request).inventory_service.add_item(user_id, body.model_dump())
    return _serialize_inventory(item)


@router.patch("/inventory/{item_id}")
def update_inventory_item(
    item_id: UUID,
    body: InventoryUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    item = get_container(request).inventory_service.update_item(
        user_id, item_id, body.model_dump(exclude_unset=True)
    )
    if item is None:
        raise _not_found()
    return _serialize_inventory(item)


@router.delete("/inventory/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(
    item_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    if not get_container(request).inventory_service.delete_item(user_id, item_id):
        raise _not_found()


@router.get("/shopping-list")
def list_shopping_items(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    items = get_container(request).shopping_list_service.list_items(user_id)
    return {"items": jsonable_encoder(items)}


@router.post("/shopping-list", status_code=status.HTTP_201_CREATED)
def add_shopping_item(
    body: ShoppingItemCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    item = get_container(request).shopping_list_service.add_item(
        user_id, body.ingredient_id, body.quantity_needed
    )
    return jsonable_encoder(item)


@router.delete("/shopping-list/purchased")
def clear_purchased(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, int]:
    """Remove every ticked-off item."""
    removed = get_container(request).shopping_list_service.clear_purchased(user_id)
    return {"removed": removed}


@router.post("/shopping-list/{item_id}/purchased")
def set_purchased(
    item_id: UUID,
    body: PurchasedUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    item = get_container(request).shopping_list_service.set_purchased(
        user_id, item_id, body.is_purchased
    )
    if item is None:
        raise _not_found()
    return jsonable_encoder(item)


@router.delete("/shopping-list/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_shopping_item(
    item_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    if not get_container(request).shopping_list_service.remove_item(user_id, item_id):
        raise _not_found()


def _serialize_inventory(item: InventoryItem) -> dict[str, object]:
    return {**jsonable_encoder(item), "low_stock": is_low_stock(item)}
