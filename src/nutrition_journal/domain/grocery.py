"""Domain models for stores, grocery purchases, inventory and the shopping list."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from nutrition_journal.domain.pantry import Ingredient, IngredientCategory

UNKNOWN_STORE_NAME = "Unknown Store"


@dataclass(frozen=True)
class Store:
    """Shop the user buys groceries at."""

    id: UUID
    user_id: UUID
    name: str
    emoji: str | None = None


@dataclass(frozen=True)
class GroceryPurchase:
    """One bought item with its price; ingredient and store are joined on read."""

    id: UUID
    user_id: UUID
    ingredient_id: UUID | None
    store_id: UUID | None
    quantity: float
    unit: str
    price: float
    purchased_at: datetime
    notes: str | None = None
    ingredient: Ingredient | None = None
    store: Store | None = None


class SpendingPeriod(str, Enum):
    """Windows the spending overview can cover."""

    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    YEAR = "year"
    ALL = "all"


@dataclass(frozen=True)
class CategorySpending:
    category: IngredientCategory
    total: float
    count: int


@dataclass(frozen=True)
class StoreSpending:
    store_id: UUID | None
    store_name: str
    store_emoji: str | None
    total: float
    count: int


@dataclass(frozen=True)
class SpendingSummary:
    """Spending over a period, broken down by category and by store."""

    period: SpendingPeriod
    start: datetime | None
    end: datetime
    total: float
    count: int
    average: float
    by_category: list[CategorySpending] = field(default_factory=list)
    by_store: list[StoreSpending] = field(default_factory=list)


@dataclass(frozen=True)
class InventoryItem:
    """Stock the user keeps of one ingredient."""

    id: UUID
    user_id: UUID
    ingredient_id: UUID
    quantity_on_hand: float
    unit: str
    threshold_quantity: float = 0.0
    ingredient: Ingredient | None = None


@dataclass(frozen=True)
class ShoppingListItem:
    """Ingredient the user still has to buy."""

    id: UUID
    user_id: UUID
    ingredient_id: UUID
    quantity_needed: float
    is_purchased: bool = False
    auto_added: bool = False
    ingredient: Ingredient | None = None
