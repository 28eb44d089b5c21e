"""Supabase repositories for stores, purchases, inventory and the shopping list."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_journal.adapters.supabase_ingredient_repository import parse_ingredient
from nutrition_journal.domain.grocery import (
    GroceryPurchase,
    InventoryItem,
    ShoppingListItem,
    Store,
)
from nutrition_journal.services.grocery import (
    InventoryRepository,
    PurchaseRepository,
    ShoppingListRepository,
    StoreRepository,
)

_PURCHASE_SELECT = "*, ingredient:ingredients (*), store:stores (*)"
_WITH_INGREDIENT = "*, ingredient:ingredients (*)"


@dataclass
class SupabaseStoreRepository(StoreRepository):
    """Supabase implementation for stores."""

    client: Client

    def list_stores(self, user_id: UUID) -> list[Store]:
        response = (
            self.client.table("stores")
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [_parse_store(row) for row in response.data or []]

    def get_store(self, user_id: UUID, store_id: UUID) -> Store | None:
        response = (
            self.client.table("stores")
            .select("*")
            .eq("id", str(store_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_store(response.data[0])

    def create_store(self, user_id: UUID, payload: dict[str, object]) -> Store:
        response = (
            self.client.table("stores")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create store")
        return _parse_store(response.data[0])

    def update_store(
        self, user_id: UUID, store_id: UUID, payload: dict[str, object]
    ) -> Store | None:
        response = (
            self.client.table("stores")
            .update(payload)
            .eq("id", str(store_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_store(response.data[0])

    def delete_store(self, user_id: UUID, store_id: UUID) -> bool:
        response = (
            self.client.table("stores")
            .delete()
            .eq("id", str(store_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


@dataclass
class SupabasePurchaseRepository(PurchaseRepository):
    """Supabase implementation for grocery purchases."""

    client: Client

    def list_purchases(
        self, user_id: UUID, start: datetime | None, end: datetime | None
    ) -> list[GroceryPurchase]:
        """Return purchases with their ingredient and store joined in."""
        query = (
            self.client.table("grocery_purchases")
            .select(_PURCHASE_SELECT)
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("purchased_at", start.isoformat())
        if end is not None:
            query = query.lte("purchased_at", end.isoformat())
        response = query.order("purchased_at", desc=True).execute()
        return [_parse_purchase(row) for row in response.data or []]

    def create_purchase(
        self, user_id: UUID, payload: dict[str, object]
    ) -> GroceryPurchase:
        response = (
            self.client.table("grocery_purchases")
            .insert({"user_id": str(user_id), **_serialize(payload)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record purchase")
        return _parse_purchase(response.data[0])

    def delete_purchase(self, user_id: UUID, purchase_id: UUID) -> bool:
        response = (
            self.client.table("grocery_purchases")
            .delete()
            .eq("id", str(purchase_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


@dataclass
class SupabaseInventoryRepository(InventoryRepository):
    """Supabase implementation for grocery inventory."""

    client: Client

    def list_items(self, user_id: UUID) -> list[InventoryItem]:
        response = (
            self.client.table("grocery_inventory")
            .select(_WITH_INGREDIENT)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_inventory_item(row) for row in response.data or []]

    def create_item(self, user_id: UUID, payload: dict[str, object]) -> InventoryItem:
        response = (
            self.client.table("grocery_inventory")
            .insert({"user_id": str(user_id), **_serialize(payload)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add inventory item")
        return _parse_inventory_item(response.data[0])

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> InventoryItem | None:
        response = (
            self.client.table("grocery_inventory")
            .update(_serialize(payload))
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_inventory_item(response.data[0])

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        response = (
            self.client.table("grocery_inventory")
            .delete()
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


@dataclass
class SupabaseShoppingListRepository(ShoppingListRepository):
    """Supabase implementation for the shopping list."""

    client: Client

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        response = (
            self.client.table("shopping_list")
            .select(_WITH_INGREDIENT)
            .eq("user_id", str(user_id))
            .order("is_purchased")
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_shopping_item(row) for row in response.data or []]

    def create_item(
        self, user_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem:
        response = (
            self.client.table("shopping_list")
            .insert({"user_id": str(user_id), **_serialize(payload)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add shopping list item")
        return _parse_shopping_item(response.data[0])

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem | None:
        response = (
            self.client.table("shopping_list")
            .update(_serialize(payload))
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_shopping_item(response.data[0])

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        response = (
            self.client.table("shopping_list")
            .delete()
            .eq("id", str(item_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)

    def delete_purchased(self, user_id: UUID) -> int:
        response = (
            self.client.table("shopping_list")
            .delete()
            .eq("user_id", str(user_id))
            .eq("is_purchased", True)
            .execute()
        )
        return len(response.data or [])


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    serialized: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, UUID):
            serialized[key] = str(value)
        elif isinstance(value, datetime):
            serialized[key] = value.isoformat()
        else:
            serialized[key] = value
    return serialized


def _optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def _parse_store(row: dict[str, object]) -> Store:
    return Store(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        emoji=row.get("emoji"),
    )


def _parse_purchase(row: dict[str, object]) -> GroceryPurchase:
    ingredient = row.get("ingredient")
    store = row.get("store")
    return GroceryPurchase(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        ingredient_id=_optional_uuid(row.get("ingredient_id")),
        store_id=_optional_uuid(row.get("store_id")),
        quantity=float(row.get("quantity", 1.0)),
        unit=str(row.get("unit") or ""),
        price=float(row.get("price", 0.0)),
        purchased_at=datetime.fromisoformat(str(row["purchased_at"])),
        notes=row.get("notes"),
        ingredient=parse_ingredient(ingredient) if ingredient else None,
        store=_parse_store(store) if store else None,
    )


def _parse_inventory_item(row: dict[str, object]) -> InventoryItem:
    ingredient = row.get("ingredient")
    return InventoryItem(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        ingredient_id=UUID(str(row["ingredient_id"])),
        quantity_on_hand=float(row.get("quantity_on_hand", 0.0)),
        unit=str(row.get("unit") or ""),
        threshold_quantity=float(row.get("threshold_quantity") or 0.0),
        ingredient=parse_ingredient(ingredient) if ingredient else None,
    )


def _parse_shopping_item(row: dict[str, object]) -> ShoppingListItem:
    ingredient = row.get("ingredient")
    return ShoppingListItem(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        ingredient_id=UUID(str(row["ingredient_id"])),
        quantity_needed=float(row.get("quantity_needed", 1.0)),
        is_purchased=bool(row.get("is_purchased", False)),
        auto_added=bool(row.get("auto_added", False)),
        ingredient=parse_ingredient(ingredient) if ingredient else None,
    )
