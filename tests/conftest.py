"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from nutrition_journal.config import Settings
from nutrition_journal.containers import AppContainer
from nutrition_journal.domain.entries import (
    EntryIngredient,
    FoodEntry,
    FoodEntryDetail,
    MealType,
)
from nutrition_journal.domain.grocery import (
    GroceryPurchase,
    InventoryItem,
    ShoppingListItem,
    Store,
)
from nutrition_journal.domain.nutrition import MacroGoals
from nutrition_journal.domain.pantry import Ingredient, IngredientCategory
from nutrition_journal.domain.recipes import Recipe, RecipeDetail, RecipeIngredient
from nutrition_journal.domain.stats import UserStreak
from nutrition_journal.services.cache import InMemoryCache, QueryCache
from nutrition_journal.services.entries import FoodEntryRepository, FoodEntryService
from nutrition_journal.services.grocery import (
    InventoryRepository,
    InventoryService,
    PurchaseRepository,
    PurchaseService,
    ShoppingListRepository,
    ShoppingListService,
    StoreRepository,
    StoreService,
)
from nutrition_journal.services.pantry import IngredientRepository, PantryService
from nutrition_journal.services.recipes import RecipeRepository, RecipeService
from nutrition_journal.services.stats import StatsService
from nutrition_journal.services.user_settings import (
    StreakRepository,
    StreakService,
    UserSettingsRepository,
    UserSettingsService,
)
from nutrition_journal.services.wizard import WizardService

API_TOKEN = "api-token"


def make_ingredient(  # noqa: PLR0913
    name: str = "Egg",
    calories: float = 70,
    protein: float = 6,
    carbs: float = 0.5,
    fat: float = 5,
    category: IngredientCategory = IngredientCategory.PROTEINS,
    user_id: UUID | None = None,
) -> Ingredient:
    return Ingredient(
        id=uuid4(),
        user_id=user_id,
        name=name,
        emoji=None,
        category=category,
        serving_size=1,
        serving_unit="piece",
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
    )


def make_recipe(
    servings: int = 1,
    calories: float = 600,
    protein: float = 40,
    carbs: float = 60,
    fat: float = 20,
    user_id: UUID | None = None,
) -> Recipe:
    return Recipe(
        id=uuid4(),
        user_id=user_id or uuid4(),
        name="Chicken bowl",
        emoji=None,
        description=None,
        instructions=None,
        servings=servings,
        prep_time=None,
        cook_time=None,
        total_calories=calories,
        total_protein=protein,
        total_carbs=carbs,
        total_fat=fat,
    )


def _visible(ingredient: Ingredient, user_id: UUID) -> bool:
    return ingredient.user_id in {user_id, None}


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    """In-memory ingredient repository for tests."""

    ingredients: dict[UUID, Ingredient] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def add(self, ingredient: Ingredient) -> Ingredient:
        self.ingredients[ingredient.id] = ingredient
        return ingredient

    def list_ingredients(
        self, user_id: UUID, category: IngredientCategory | None
    ) -> list[Ingredient]:
        self.calls.append("list")
        return sorted(
            (
                item
                for item in self.ingredients.values()
                if _visible(item, user_id)
                and (category is None or item.category == category)
            ),
            key=lambda item: item.name,
        )

    def get_ingredient(self, user_id: UUID, ingredient_id: UUID) -> Ingredient | None:
        self.calls.append("get")
        ingredient = self.ingredients.get(ingredient_id)
        if ingredient is None or not _visible(ingredient, user_id):
            return None
        return ingredient

    def get_ingredients(
        self, user_id: UUID, ingredient_ids: list[UUID]
    ) -> list[Ingredient]:
        return [
            self.ingredients[i]
            for i in ingredient_ids
            if i in self.ingredients and _visible(self.ingredients[i], user_id)
        ]

    def search_ingredients(self, user_id: UUID, query: str, limit: int) -> list[Ingredient]:
        self.calls.append("search")
        return [
            item
            for item in self.ingredients.values()
            if _visible(item, user_id) and query.lower() in item.name.lower()
        ][:limit]

    def create_ingredient(
        self, user_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        ingredient = Ingredient(
            id=uuid4(),
            user_id=user_id,
            name=str(payload["name"]),
            emoji=payload.get("emoji"),
            category=IngredientCategory(payload["category"]),
            serving_size=float(payload.get("serving_size", 1)),
            serving_unit=str(payload.get("serving_unit", "serving")),
            calories=float(payload.get("calories", 0)),
            protein=float(payload.get("protein", 0)),
            carbs=float(payload.get("carbs", 0)),
            fat=float(payload.get("fat", 0)),
        )
        return self.add(ingredient)

    def update_ingredient(
        self, user_id: UUID, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient | None:
        current = self.ingredients.get(ingredient_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(current, **payload)
        self.ingredients[ingredient_id] = updated
        return updated

    def delete_ingredient(self, user_id: UUID, ingredient_id: UUID) -> bool:
        current = self.ingredients.get(ingredient_id)
        if current is None or current.user_id != user_id:
            return False
        del self.ingredients[ingredient_id]
        return True


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    ingredient_repository: InMemoryIngredientRepository
    recipes: dict[UUID, Recipe] = field(default_factory=dict)
    recipe_ingredients: dict[UUID, list[tuple[UUID, float]]] = field(
        default_factory=dict
    )

    def add(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    def list_recipes(self, user_id: UUID, favorites_only: bool) -> list[Recipe]:
        return [
            recipe
            for recipe in self.recipes.values()
            if recipe.user_id == user_id and (recipe.is_favorite or not favorites_only)
        ]

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> RecipeDetail | None:
        recipe = self.recipes.get(recipe_id)
        if recipe is None or recipe.user_id != user_id:
            return None
        ingredients = [
            RecipeIngredient(
                ingredient=self.ingredient_repository.ingredients[ingredient_id],
                quantity=quantity,
            )
            for ingredient_id, quantity in self.recipe_ingredients.get(recipe_id, [])
        ]
        return RecipeDetail(recipe=recipe, ingredients=ingredients)

    def search_recipes(self, user_id: UUID, query: str, limit: int) -> list[Recipe]:
        return [
            recipe
            for recipe in self.recipes.values()
            if recipe.user_id == user_id and query.lower() in recipe.name.lower()
        ][:limit]

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        recipe = Recipe(
            id=uuid4(),
            user_id=user_id,
            name=str(payload["name"]),
            emoji=payload.get("emoji"),
            description=payload.get("description"),
            instructions=payload.get("instructions"),
            servings=int(payload.get("servings", 1)),
            prep_time=payload.get("prep_time"),
            cook_time=payload.get("cook_time"),
            total_calories=float(payload["total_calories"]),
            total_protein=float(payload["total_protein"]),
            total_carbs=float(payload["total_carbs"]),
            total_fat=float(payload["total_fat"]),
            is_favorite=bool(payload.get("is_favorite", False)),
        )
        return self.add(recipe)

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe | None:
        current = self.recipes.get(recipe_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(current, **payload)
        self.recipes[recipe_id] = updated
        return updated

    def replace_recipe_ingredients(
        self, recipe_id: UUID, ingredients: list[tuple[UUID, float]]
    ) -> None:
        self.recipe_ingredients[recipe_id] = list(ingredients)

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> bool:
        current = self.recipes.get(recipe_id)
        if current is None or current.user_id != user_id:
            return False
        del self.recipes[recipe_id]
        self.recipe_ingredients.pop(recipe_id, None)
        return True


@dataclass
class InMemoryFoodEntryRepository(FoodEntryRepository):
    """In-memory food entry repository for tests."""

    entries: dict[UUID, FoodEntry] = field(default_factory=dict)
    entry_ingredients: dict[UUID, list[EntryIngredient]] = field(default_factory=dict)
    payloads: list[dict[str, object]] = field(default_factory=list)
    fail_with: Exception | None = None

    def add(self, entry: FoodEntry) -> FoodEntry:
        self.entries[entry.id] = entry
        return entry

    def create_entry(self, user_id: UUID, payload: dict[str, object]) -> FoodEntry:
        if self.fail_with is not None:
            raise self.fail_with
        self.payloads.append(payload)
        recipe_id = payload.get("recipe_id")
        entry = FoodEntry(
            id=uuid4(),
            user_id=user_id,
            meal_type=MealType(payload["meal_type"]),
            recipe_id=UUID(str(recipe_id)) if recipe_id else None,
            servings=float(payload["servings"]),
            calories=float(payload["calories"]),
            protein=float(payload["protein"]),
            carbs=float(payload["carbs"]),
            fat=float(payload["fat"]),
            notes=payload.get("notes"),
            logged_at=datetime.fromisoformat(str(payload["logged_at"])),
        )
        return self.add(entry)

    def create_entry_ingredients(
        self, entry_id: UUID, ingredients: list[EntryIngredient]
    ) -> None:
        self.entry_ingredients[entry_id] = list(ingredients)

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        return sorted(
            (
                entry
                for entry in self.entries.values()
                if entry.user_id == user_id and start <= entry.logged_at < end
            ),
            key=lambda entry: entry.logged_at,
        )

    def get_entry(self, user_id: UUID, entry_id: UUID) -> FoodEntryDetail | None:
        entry = self.entries.get(entry_id)
        if entry is None or entry.user_id != user_id:
            return None
        return FoodEntryDetail(
            entry=entry, ingredients=self.entry_ingredients.get(entry_id, [])
        )

    def update_entry(
        self, user_id: UUID, entry_id: UUID, payload: dict[str, object]
    ) -> FoodEntry | None:
        current = self.entries.get(entry_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(current, **payload)
        self.entries[entry_id] = updated
        return updated

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        current = self.entries.get(entry_id)
        if current is None or current.user_id != user_id:
            return False
        del self.entries[entry_id]
        self.entry_ingredients.pop(entry_id, None)
        return True


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    goals: dict[UUID, MacroGoals] = field(default_factory=dict)

    def get_goals(self, user_id: UUID) -> MacroGoals | None:
        return self.goals.get(user_id)

    def upsert_goals(self, user_id: UUID, goals: MacroGoals) -> None:
        self.goals[user_id] = goals


@dataclass
class InMemoryStreakRepository(StreakRepository):
    """In-memory streak repository for tests."""

    streaks: dict[UUID, UserStreak] = field(default_factory=dict)

    def get_streak(self, user_id: UUID) -> UserStreak | None:
        return self.streaks.get(user_id)

    def upsert_streak(self, user_id: UUID, streak: UserStreak) -> None:
        self.streaks[user_id] = streak


@dataclass
class InMemoryStoreRepository(StoreRepository):
    """In-memory store repository for tests."""

    stores: dict[UUID, Store] = field(default_factory=dict)

    def list_stores(self, user_id: UUID) -> list[Store]:
        owned = [store for store in self.stores.values() if store.user_id == user_id]
        return sorted(owned, key=lambda store: store.name)

    def get_store(self, user_id: UUID, store_id: UUID) -> Store | None:
        store = self.stores.get(store_id)
        if store is None or store.user_id != user_id:
            return None
        return store

    def create_store(self, user_id: UUID, payload: dict[str, object]) -> Store:
        store = Store(id=uuid4(), user_id=user_id, **payload)
        self.stores[store.id] = store
        return store

    def update_store(
        self, user_id: UUID, store_id: UUID, payload: dict[str, object]
    ) -> Store | None:
        current = self.get_store(user_id, store_id)
        if current is None:
            return None
        updated = replace(current, **payload)
        self.stores[store_id] = updated
        return updated

    def delete_store(self, user_id: UUID, store_id: UUID) -> bool:
        if self.get_store(user_id, store_id) is None:
            return False
        del self.stores[store_id]
        return True


@dataclass
class InMemoryPurchaseRepository(PurchaseRepository):
    """In-memory purchase repository that joins ingredients and stores on read."""

    ingredient_repository: InMemoryIngredientRepository
    store_repository: InMemoryStoreRepository
    purchases: dict[UUID, GroceryPurchase] = field(default_factory=dict)
    ranges: list[tuple[datetime | None, datetime | None]] = field(default_factory=list)

    def list_purchases(
        self, user_id: UUID, start: datetime | None, end: datetime | None
    ) -> list[GroceryPurchase]:
        self.ranges.append((start, end))
        found = [
            self._joined(purchase)
            for purchase in self.purchases.values()
            if purchase.user_id == user_id
            and (start is None or purchase.purchased_at >= start)
            and (end is None or purchase.purchased_at <= end)
        ]
        return sorted(found, key=lambda purchase: purchase.purchased_at, reverse=True)

    def create_purchase(
        self, user_id: UUID, payload: dict[str, object]
    ) -> GroceryPurchase:
        purchase = GroceryPurchase(
            id=uuid4(),
            user_id=user_id,
            ingredient_id=payload.get("ingredient_id"),
            store_id=payload.get("store_id"),
            quantity=float(payload["quantity"]),
            unit=str(payload["unit"]),
            price=float(payload["price"]),
            purchased_at=payload["purchased_at"],
            notes=payload.get("notes"),
        )
        self.purchases[purchase.id] = purchase
        return purchase

    def delete_purchase(self, user_id: UUID, purchase_id: UUID) -> bool:
        current = self.purchases.get(purchase_id)
        if current is None or current.user_id != user_id:
            return False
        del self.purchases[purchase_id]
        return True

    def _joined(self, purchase: GroceryPurchase) -> GroceryPurchase:
        return replace(
            purchase,
            ingredient=self.ingredient_repository.ingredients.get(purchase.ingredient_id),
            store=self.store_repository.stores.get(purchase.store_id),
        )


@dataclass
class InMemoryInventoryRepository(InventoryRepository):
    """In-memory inventory repository for tests."""

    items: dict[UUID, InventoryItem] = field(default_factory=dict)

    def list_items(self, user_id: UUID) -> list[InventoryItem]:
        return [item for item in self.items.values() if item.user_id == user_id]

    def create_item(self, user_id: UUID, payload: dict[str, object]) -> InventoryItem:
        item = InventoryItem(id=uuid4(), user_id=user_id, **payload)
        self.items[item.id] = item
        return item

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> InventoryItem | None:
        current = self.items.get(item_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(current, **payload)
        self.items[item_id] = updated
        return updated

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        current = self.items.get(item_id)
        if current is None or current.user_id != user_id:
            return False
        del self.items[item_id]
        return True


@dataclass
class InMemoryShoppingListRepository(ShoppingListRepository):
    """In-memory shopping list repository for tests."""

    items: dict[UUID, ShoppingListItem] = field(default_factory=dict)

    def list_items(self, user_id: UUID) -> list[ShoppingListItem]:
        owned = [item for item in self.items.values() if item.user_id == user_id]
        return sorted(owned, key=lambda item: item.is_purchased)

    def create_item(
        self, user_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem:
        item = ShoppingListItem(id=uuid4(), user_id=user_id, **payload)
        self.items[item.id] = item
        return item

    def update_item(
        self, user_id: UUID, item_id: UUID, payload: dict[str, object]
    ) -> ShoppingListItem | None:
        current = self.items.get(item_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(current, **payload)
        self.items[item_id] = updated
        return updated

    def delete_item(self, user_id: UUID, item_id: UUID) -> bool:
        current = self.items.get(item_id)
        if current is None or current.user_id != user_id:
            return False
        del self.items[item_id]
        return True

    def delete_purchased(self, user_id: UUID) -> int:
        purchased = [
            item.id
            for item in self.items.values()
            if item.user_id == user_id and item.is_purchased
        ]
        for item_id in purchased:
            del self.items[item_id]
        return len(purchased)


def make_entry(  # noqa: PLR0913
    user_id: UUID,
    logged_at: datetime,
    calories: float = 500,
    protein: float = 30,
    carbs: float = 50,
    fat: float = 10,
    meal_type: MealType = MealType.LUNCH,
) -> FoodEntry:
    return FoodEntry(
        id=uuid4(),
        user_id=user_id,
        meal_type=meal_type,
        recipe_id=None,
        servings=1,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        notes=None,
        logged_at=logged_at,
    )


def now_utc() -> datetime:
    return datetime.now(tz=UTC)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token=API_TOKEN,
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def queries() -> QueryCache:
    return QueryCache(cache=InMemoryCache(), retry_delay_seconds=0)


@pytest.fixture
def ingredient_repository() -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository()


@pytest.fixture
def recipe_repository(
    ingredient_repository: InMemoryIngredientRepository,
) -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository(ingredient_repository)


@pytest.fixture
def entry_repository() -> InMemoryFoodEntryRepository:
    return InMemoryFoodEntryRepository()


@pytest.fixture
def settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def streak_repository() -> InMemoryStreakRepository:
    return InMemoryStreakRepository()


@pytest.fixture
def pantry_service(
    ingredient_repository: InMemoryIngredientRepository, queries: QueryCache
) -> PantryService:
    return PantryService(repository=ingredient_repository, queries=queries)


@pytest.fixture
def recipe_service(
    recipe_repository: InMemoryRecipeRepository,
    pantry_service: PantryService,
    queries: QueryCache,
) -> RecipeService:
    return RecipeService(
        repository=recipe_repository, pantry_service=pantry_service, queries=queries
    )


@pytest.fixture
def streak_service(streak_repository: InMemoryStreakRepository) -> StreakService:
    return StreakService(streak_repository)


@pytest.fixture
def entry_service(
    entry_repository: InMemoryFoodEntryRepository, streak_service: StreakService
) -> FoodEntryService:
    return FoodEntryService(repository=entry_repository, streak_service=streak_service)


@pytest.fixture
def user_settings_service(
    settings_repository: InMemoryUserSettingsRepository,
) -> UserSettingsService:
    return UserSettingsService(settings_repository)


@pytest.fixture
def wizard_service(
    entry_service: FoodEntryService,
    pantry_service: PantryService,
    recipe_service: RecipeService,
) -> WizardService:
    return WizardService(
        entry_service=entry_service,
        pantry_service=pantry_service,
        recipe_service=recipe_service,
        submission_timeout_seconds=1.0,
    )


@pytest.fixture
def store_repository() -> InMemoryStoreRepository:
    return InMemoryStoreRepository()


@pytest.fixture
def purchase_repository(
    ingredient_repository: InMemoryIngredientRepository,
    store_repository: InMemoryStoreRepository,
) -> InMemoryPurchaseRepository:
    return InMemoryPurchaseRepository(ingredient_repository, store_repository)


@pytest.fixture
def inventory_repository() -> InMemoryInventoryRepository:
    return InMemoryInventoryRepository()


@pytest.fixture
def shopping_list_repository() -> InMemoryShoppingListRepository:
    return InMemoryShoppingListRepository()


@pytest.fixture
def store_service(
    store_repository: InMemoryStoreRepository, queries: QueryCache
) -> StoreService:
    return StoreService(store_repository, queries)


@pytest.fixture
def purchase_service(
    purchase_repository: InMemoryPurchaseRepository,
    pantry_service: PantryService,
    store_service: StoreService,
    queries: QueryCache,
) -> PurchaseService:
    return PurchaseService(
        repository=purchase_repository,
        pantry_service=pantry_service,
        store_service=store_service,
        queries=queries,
    )


@pytest.fixture
def shopping_list_service(
    shopping_list_repository: InMemoryShoppingListRepository,
    pantry_service: PantryService,
    queries: QueryCache,
) -> ShoppingListService:
    return ShoppingListService(
        repository=shopping_list_repository,
        pantry_service=pantry_service,
        queries=queries,
    )


@pytest.fixture
def inventory_service(
    inventory_repository: InMemoryInventoryRepository,
    pantry_service: PantryService,
    shopping_list_service: ShoppingListService,
    queries: QueryCache,
) -> InventoryService:
    return InventoryService(
        repository=inventory_repository,
        pantry_service=pantry_service,
        shopping_list_service=shopping_list_service,
        queries=queries,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    pantry_service: PantryService,
    recipe_service: RecipeService,
    entry_service: FoodEntryService,
    user_settings_service: UserSettingsService,
    streak_service: StreakService,
    wizard_service: WizardService,
    store_service: StoreService,
    purchase_service: PurchaseService,
    inventory_service: InventoryService,
    shopping_list_service: ShoppingListService,
) -> AppContainer:
    stats_service = StatsService(
        entry_service=entry_service, settings_service=user_settings_service
    )

    async def close_resources() -> None:
        wizard_service.close_all()

    return AppContainer(
        settings=settings,
        pantry_service=pantry_service,
        recipe_service=recipe_service,
        entry_service=entry_service,
        stats_service=stats_service,
        user_settings_service=user_settings_service,
        streak_service=streak_service,
        wizard_service=wizard_service,
        store_service=store_service,
        purchase_service=purchase_service,
        inventory_service=inventory_service,
        shopping_list_service=shopping_list_service,
        close_resources=close_resources,
    )
