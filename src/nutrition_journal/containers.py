"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_journal.adapters.supabase_food_entry_repository import (
    SupabaseFoodEntryRepository,
)
from nutrition_journal.adapters.supabase_grocery_repository import (
    SupabaseInventoryRepository,
    SupabasePurchaseRepository,
    SupabaseShoppingListRepository,
    SupabaseStoreRepository,
)
from nutrition_journal.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from nutrition_journal.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from nutrition_journal.adapters.supabase_user_settings_repository import (
    SupabaseStreakRepository,
    SupabaseUserSettingsRepository,
)
from nutrition_journal.config import Settings
from nutrition_journal.services.cache import InMemoryCache, QueryCache
from nutrition_journal.services.entries import FoodEntryService
from nutrition_journal.services.grocery import (
    InventoryService,
    PurchaseService,
    ShoppingListService,
    StoreService,
)
from nutrition_journal.services.pantry import PantryService
from nutrition_journal.services.recipes import RecipeService
from nutrition_journal.services.stats import StatsService
from nutrition_journal.services.user_settings import (
    StreakService,
    UserSettingsService,
)
from nutrition_journal.services.wizard import WizardService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    pantry_service: PantryService
    recipe_service: RecipeService
    entry_service: FoodEntryService
    stats_service: StatsService
    user_settings_service: UserSettingsService
    streak_service: StreakService
    wizard_service: WizardService
    store_service: StoreService
    purchase_service: PurchaseService
    inventory_service: InventoryService
    shopping_list_service: ShoppingListService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    queries = QueryCache(
        cache=InMemoryCache(),
        stale_seconds=resolved_settings.query_stale_seconds,
        retry_attempts=resolved_settings.query_retry_attempts,
    )
    pantry_service = PantryService(
        repository=SupabaseIngredientRepository(supabase_client),
        queries=queries,
    )
    recipe_service = RecipeService(
        repository=SupabaseRecipeRepository(supabase_client),
        pantry_service=pantry_service,
        queries=queries,
    )
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client)
    )
    streak_service = StreakService(SupabaseStreakRepository(supabase_client))
    entry_service = FoodEntryService(
        repository=SupabaseFoodEntryRepository(supabase_client),
        streak_service=streak_service,
        timezone_name=resolved_settings.default_timezone,
    )
    stats_service = StatsService(
        entry_service=entry_service,
        settings_service=user_settings_service,
    )
    wizard_service = WizardService(
        entry_service=entry_service,
        pantry_service=pantry_service,
        recipe_service=recipe_service,
        submission_timeout_seconds=resolved_settings.submission_timeout_seconds,
        idle_seconds=resolved_settings.wizard_idle_seconds,
    )
    store_service = StoreService(SupabaseStoreRepository(supabase_client), queries)
    purchase_service = PurchaseService(
        repository=SupabasePurchaseRepository(supabase_client),
        pantry_service=pantry_service,
        store_service=store_service,
        queries=queries,
    )
    shopping_list_service = ShoppingListService(
        repository=SupabaseShoppingListRepository(supabase_client),
        pantry_service=pantry_service,
        queries=queries,
    )
    inventory_service = InventoryService(
        repository=SupabaseInventoryRepository(supabase_client),
        pantry_service=pantry_service,
        shopping_list_service=shopping_list_service,
        queries=queries,
    )

    async def close_resources() -> None:
        wizard_service.close_all()

    return AppContainer(
        settings=resolved_settings,
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
