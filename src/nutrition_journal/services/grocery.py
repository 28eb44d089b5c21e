"""Grocery services: stores, purchases with spending, inventory and shopping list."""

import calendar
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.grocery import (
    UNKNOWN_STORE_NAME,
    CategorySpending,
    GroceryPurchase,
    InventoryItem,
    ShoppingListItem,
    SpendingPeriod,
    SpendingSummary,
    Store,
    StoreSpending,
)
from nutrition_journal.domain.pantry import IngredientCategory
from nutrition_journal.services.cache import QueryCache
from nutrition_journal.services.pantry import PantryService

STORES_KEY = "stores"
PURCHASES_KEY = "grocery_purchases"
INVENTORY_KEY = "inventory"
SHOPPING_LIST_KEY = "shopping-list"
DEFAULT_PURCHASE_UNIT = "g"

_logger = logging.getLogger(__name__)


class InvalidGroceryError(ValueError):
    """Raised when a grocery record fails validation before it is stored."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = errors


class StoreRepository(Protocol):
    """Persistence interface for stores."""

    def list_stores(self, user_id: UUID) -> list[Store]:
        """Return the user's stores ordered by name."""

    def get_store(self, user_id: UUID, store_id: UUID) -> Store | None:
        """Return one of the user's stores, if present."""

    def create_store(self, user_id: UUID, payload: dict[str, object]) -> Store:
        """Create a store and return it."""

    def update_store(
        self, user_id: UUID, store_id: UUID, payload: dict[str, object]
    ) -> Store | None:
        """Update one of the user's stores; None when it is not theirs."""

    def delete_store(self, user_id: UUID, store_id: UUID) -> bool:
        """Delete one of the user's stores; False when nothing matched."""


class PurchaseRepository(Protocol):
    """Persistence interface for grocery purchases."""

    def list_purchases(
        self, user_id: UUID, start: datetime | None, end: datetime | None
    ) -> list[GroceryPurchase]:
        """Return purchases in [start, end], newest first, with ingredient and store."""

    def create_purchase(
        self, user_id: UUID, payload: dict[str, object]
    ) -> GroceryPurchase:
        """Create a purchase and return it."""

    def delete_purchase(self, user_id: UUID, purchase_id: UUID) -> bool:
        """Delete one of the user's purchases; False when nothing matched."""


class InventoryRepository(Protocol):
    """Persistence interface for grocery inventory."""

    def list_items(self, user_id: UUID) -> list[InventoryItem]:
        """Return the user's inventory, newest first."""

    def create_item(self, user_id: UUID, payload: dict[str, object]) -> InventoryItem:
        """Create an inventory row and return it."""

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> InventoryItem | None:
        """Update one of the user's inventory rows; None when it is not theirs."""

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        """Delete one of the user's inventory rows; False when nothing matched."""


class ShoppingListRepository(Protocol):
    """Persistence interface for the shopping list."""

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        """Return open items first, then purchased ones, newest first within each."""

    def create_item(
        self, user_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem:
        """Create a shopping list row and return it."""

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem | None:
        """Update one of the user's rows; None when it is not theirs."""

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        """Delete one of the user's rows; False when nothing matched."""

    def delete_purchased(self, user_id: UUID) -> int:
        """Delete the user's purchased rows and return how many went."""


def period_range(period: SpendingPeriod, now: datetime) -> datetime | None:
    """Return where a spending period starts; None covers all time.

    Weeks start on Monday. The three and six month windows reach back from
    ``now`` rather than from the start of a month.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is SpendingPeriod.WEEK:
        return midnight - timedelta(days=now.weekday())
    if period is SpendingPeriod.MONTH:
        return midnight.replace(day=1)
    if period is SpendingPeriod.THREE_MONTHS:
        return _months_before(now, 3)
    if period is SpendingPeriod.SIX_MONTHS:
        return _months_before(now, 6)
    if period is SpendingPeriod.YEAR:
        return midnight.replace(month=1, day=1)
    return None


def _months_before(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def spending_by_category(purchases: list[GroceryPurchase]) -> list[CategorySpending]:
    """Total spend per ingredient category, largest first.

    Purchases without an ingredient are left out.
    """
    totals: dict[IngredientCategory, tuple[float, int]] = {}
    for purchase in purchases:
        if purchase.ingredient is None:
            continue
        total, count = totals.get(purchase.ingredient.category, (0.0, 0))
        totals[purchase.ingredient.category] = (total + purchase.price, count + 1)
    spending = [
        CategorySpending(category=category, total=total, count=count)
        for category, (total, count) in totals.items()
    ]
    return sorted(spending, key=lambda item: item.total, reverse=True)


def spending_by_store(purchases: list[GroceryPurchase]) -> list[StoreSpending]:
    """Total spend per store, largest first; purchases without a store share one row."""
    rows: dict[UUID | None, StoreSpending] = {}
    for purchase in purchases:
        current = rows.get(purchase.store_id)
        if current is None:
            current = StoreSpending(
                store_id=purchase.store_id,
                store_name=purchase.store.name if purchase.store else UNKNOWN_STORE_NAME,
                store_emoji=purchase.store.emoji if purchase.store else None,
                total=0.0,
                count=0,
            )
        rows[purchase.store_id] = StoreSpending(
            store_id=current.store_id,
            store_name=current.store_name,
            store_emoji=current.store_emoji,
            total=current.total + purchase.price,
            count=current.count + 1,
        )
    return sorted(rows.values(), key=lambda item: item.total, reverse=True)


def is_low_stock(item: InventoryItem) -> bool:
    """True when a threshold is set and the stock has fallen under it."""
    return item.threshold_quantity > 0 and item.quantity_on_hand < item.threshold_quantity


@dataclass
class StoreService:
    """Application service for the user's stores."""

    repository: StoreRepository
    queries: QueryCache

    def list_stores(self, user_id: UUID) -> list[Store]:
        return self.queries.fetch(
            f"{STORES_KEY}:{user_id}", lambda: self.repository.list_stores(user_id)
        )

    def get_store(self, user_id: UUID, store_id: UUID) -> Store | None:
        return self.queries.fetch(
            f"{STORES_KEY}:id:{user_id}:{store_id}",
            lambda: self.repository.get_store(user_id, store_id),
        )

    def create_store(self, user_id: UUID, payload: dict[str, object]) -> Store:
        _validate_store(payload, require_name=True)
        store = self.repository.create_store(user_id, payload)
        self.queries.invalidate(STORES_KEY)
        return store

    def update_store(
        self, user_id: UUID, store_id: UUID, payload: dict[str, object]
    ) -> Store | None:
        _validate_store(payload, require_name=False)
        store = self.repository.update_store(user_id, store_id, payload)
        self.queries.invalidate(STORES_KEY)
        return store

    def delete_store(self, user_id: UUID, store_id: UUID) -> bool:
        deleted = self.repository.delete_store(user_id, store_id)
        self.queries.invalidate(STORES_KEY)
        # purchases join the store row
        self.queries.invalidate(PURCHASES_KEY)
        return deleted


@dataclass
class PurchaseService:
    """Records grocery purchases and summarizes what was spent."""

    repository: PurchaseRepository
    pantry_service: PantryService
    store_service: StoreService
    queries: QueryCache

    def list_purchases(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[GroceryPurchase]:
        """Return the user's purchases, optionally within a date range."""
        key = (
            f"{PURCHASES_KEY}:{user_id}:"
            f"{start.isoformat() if start else '-'}:{end.isoformat() if end else '-'}"
        )
        return self.queries.fetch(
            key, lambda: self.repository.list_purchases(user_id, start, end)
        )

    def create_purchase(
        self, user_id: UUID, payload: dict[str, object]
    ) -> GroceryPurchase:
        """Validate and store a purchase.

        The ingredient must be one the user can see and the store, when given,
        must be one of theirs.
        """
        errors = _purchase_errors(payload)
        ingredient_id = payload.get("ingredient_id")
        if isinstance(ingredient_id, UUID) and (
            self.pantry_service.get_ingredient(user_id, ingredient_id) is None
        ):
            errors["ingredient_id"] = f"Unknown ingredient {ingredient_id}"
        store_id = payload.get("store_id")
        if isinstance(store_id, UUID) and (
            self.store_service.get_store(user_id, store_id) is None
        ):
            errors["store_id"] = f"Unknown store {store_id}"
        if errors:
            raise InvalidGroceryError(errors)
        purchase = self.repository.create_purchase(
            user_id,
            {
                "quantity": 1.0,
                "unit": DEFAULT_PURCHASE_UNIT,
                "purchased_at": datetime.now(tz=UTC),
                **{key: value for key, value in payload.items() if value is not None},
            },
        )
        self.queries.invalidate(PURCHASES_KEY)
        _logger.info("Recorded purchase %s for %.2f", purchase.id, purchase.price)
        return purchase

    def delete_purchase(self, user_id: UUID, purchase_id: UUID) -> bool:
        deleted = self.repository.delete_purchase(user_id, purchase_id)
        self.queries.invalidate(PURCHASES_KEY)
        return deleted

    def spending_summary(
        self,
        user_id: UUID,
        period: SpendingPeriod = SpendingPeriod.MONTH,
        now: datetime | None = None,
    ) -> SpendingSummary:
        """Summarize spending from the start of a period up to now."""
        end = now or datetime.now(tz=UTC)
        start = period_range(period, end)
        purchases = self.list_purchases(user_id, start, end if start else None)
        total = sum(purchase.price for purchase in purchases)
        count = len(purchases)
        return SpendingSummary(
            period=period,
            start=start,
            end=end,
            total=total,
            count=count,
            average=total / count if count else 0.0,
            by_category=spending_by_category(purchases),
            by_store=spending_by_store(purchases),
        )


@dataclass
class ShoppingListService:
    """Application service for the shopping list."""

    repository: ShoppingListRepository
    pantry_service: PantryService
    queries: QueryCache

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        return self.queries.fetch(
            f"{SHOPPING_LIST_KEY}:{user_id}", lambda: self.repository.list_items(user_id)
        )

    def add_item(
        self,
        user_id: UUID,
        ingredient_id: UUID,
        quantity_needed: float,
        auto_added: bool = False,
    ) -> ShoppingListItem:
        """Put an ingredient on the list."""
        errors: dict[str, str] = {}
        if quantity_needed <= 0:
            errors["quantity_needed"] = "Quantity must be positive"
        if self.pantry_service.get_ingredient(user_id, ingredient_id) is None:
            errors["ingredient_id"] = f"Unknown ingredient {ingredient_id}"
        if errors:
            raise InvalidGroceryError(errors)
        item = self.repository.create_item(
            user_id,
            {
                "ingredient_id": ingredient_id,
                "quantity_needed": quantity_needed,
                "is_purchased": False,
                "auto_added": auto_added,
            },
        )
        self.queries.invalidate(SHOPPING_LIST_KEY)
        return item

    def set_purchased(
        self, user_id: UUID, item_id: UUID, is_purchased: bool
    ) -> ShoppingListItem | None:
        item = self.repository.update_item(
            user_id, item_id, {"is_purchased": is_purchased}
        )
        self.queries.invalidate(SHOPPING_LIST_KEY)
        return item

    def remove_item(self, user_id: UUID, item_id: UUID) -> bool:
        deleted = self.repository.delete_item(user_id, item_id)
        self.queries.invalidate(SHOPPING_LIST_KEY)
        return deleted

    def clear_purchased(self, user_id: UUID) -> int:
        """Drop everything already ticked off."""
        removed = self.repository.delete_purchased(user_id)
        self.queries.invalidate(SHOPPING_LIST_KEY)
        return removed

    def has_open_item(self, user_id: UUID, ingredient_id: UUID) -> bool:
        return any(
            item.ingredient_id == ingredient_id and not item.is_purchased
            for item in self.list_items(user_id)
        )


@dataclass
class InventoryService:
    """Tracks stock on hand and refills the shopping list when it runs low."""

    repository: InventoryRepository
    pantry_service: PantryService
    shopping_list_service: ShoppingListService
    queries: QueryCache

    def list_items(self, user_id: UUID) -> list[InventoryItem]:
        return self.queries.fetch(
            f"{INVENTORY_KEY}:{user_id}", lambda: self.repository.list_items(user_id)
        )

    def low_stock(self, user_id: UUID) -> list[InventoryItem]:
        return [item for item in self.list_items(user_id) if is_low_stock(item)]

    def add_item(self, user_id: UUID, payload: dict[str, object]) -> InventoryItem:
        """Start tracking an ingredient."""
        errors = _inventory_errors(payload)
        ingredient_id = payload.get("ingredient_id")
        if not isinstance(ingredient_id, UUID):
            errors["ingredient_id"] = "Ingredient is required"
        elif self.pantry_service.get_ingredient(user_id, ingredient_id) is None:
            errors["ingredient_id"] = f"Unknown ingredient {ingredient_id}"
        if errors:
            raise InvalidGroceryError(errors)
        item = self.repository.create_item(user_id, payload)
        self.queries.invalidate(INVENTORY_KEY)
        self._restock(user_id, item)
        return item

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> InventoryItem | None:
        """Change stock, threshold or unit of one of the user's rows."""
        errors = _inventory_errors(payload)
        if errors:
            raise InvalidGroceryError(errors)
        item = self.repository.update_item(user_id, item_id, payload)
        self.queries.invalidate(INVENTORY_KEY)
        if item is not None:
            self._restock(user_id, item)
        return item

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        deleted = self.repository.delete_item(user_id, item_id)
        self.queries.invalidate(INVENTORY_KEY)
        return deleted

    def _restock(self, user_id: UUID, item: InventoryItem) -> None:
        if not is_low_stock(item):
            return
        if self.shopping_list_service.has_open_item(user_id, item.ingredient_id):
            return
        self.shopping_list_service.add_item(
            user_id,
            item.ingredient_id,
            item.threshold_quantity - item.quantity_on_hand,
            auto_added=True,
        )
        _logger.info(
            "Added ingredient %s to the shopping list, %s on hand",
            item.ingredient_id,
            item.quantity_on_hand,
        )


def _validate_store(payload: dict[str, object], *, require_name: bool) -> None:
    if require_name or "name" in payload:
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidGroceryError({"name": "Store name is required"})


def _purchase_errors(payload: dict[str, object]) -> dict[str, str]:
    errors: dict[str, str] = {}
    if payload.get("ingredient_id") is None:
        errors["ingredient_id"] = "Ingredient is required"
    price = payload.get("price")
    if not isinstance(price, int | float) or price < 0:
        errors["price"] = "Price must be zero or more"
    quantity = payload.get("quantity", 1.0)
    if quantity is not None and (not isinstance(quantity, int | float) or quantity <= 0):
        errors["quantity"] = "Quantity must be positive"
    return errors


def _inventory_errors(payload: dict[str, object]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field in ("quantity_on_hand", "threshold_quantity"):
        value = payload.get(field)
        if value is not None and (not isinstance(value, int | float) or value < 0):
            errors[field] = "Must be zero or more"
    return errors
