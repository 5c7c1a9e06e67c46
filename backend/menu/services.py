import logging

from django.conf import settings
from django.db.models import Prefetch

from core_backend.infrastructure.cache import TTLCache
from .exceptions import MenuItemNotFound, ModifierNotFound
from .models import Category, MenuItem, Modifier, ModifierGroup

logger = logging.getLogger(__name__)

PUBLIC_MENU_KEY = "public_menu"


def get_menu_cache():
    return TTLCache(
        "menu",
        default_ttl=getattr(settings, "MENU_CACHE_TTL_SECONDS", 300),
        cache_name="static_data",
    )


class CatalogReader:
    """
    Reads the catalog rows needed to validate and price a cart.

    Money-affecting reads always hit the database; only the public menu
    tree goes through the cache.
    """

    def __init__(self, cache=None):
        self.cache = cache or get_menu_cache()

    def get_menu_item_for_order(self, menu_item_id):
        """
        Menu item with every modifier group and each group's modifiers.

        Unavailable modifiers are included so the pricing engine can tell
        "unavailable" apart from "not found".
        """
        try:
            return MenuItem.objects.prefetch_related(
                Prefetch(
                    "modifier_groups",
                    queryset=ModifierGroup.objects.prefetch_related("modifiers"),
                )
            ).get(pk=menu_item_id)
        except (MenuItem.DoesNotExist, ValueError, TypeError):
            raise MenuItemNotFound(
                f"Menu item not found: {menu_item_id}",
                details={"menu_item_id": menu_item_id},
            )

    def get_modifier(self, modifier_id):
        try:
            return Modifier.objects.select_related("modifier_group").get(pk=modifier_id)
        except (Modifier.DoesNotExist, ValueError, TypeError):
            raise ModifierNotFound(
                f"Modifier not found: {modifier_id}",
                details={"modifier_id": modifier_id},
            )

    # --- public browsing path (cached) ---

    def get_public_menu(self):
        return self.cache.get_or_set(PUBLIC_MENU_KEY, self._build_public_menu)

    def invalidate_public_menu(self):
        self.cache.invalidate(PUBLIC_MENU_KEY)

    def _build_public_menu(self):
        available_modifiers = Prefetch(
            "modifiers", queryset=Modifier.objects.filter(is_available=True)
        )
        available_items = Prefetch(
            "menu_items",
            queryset=MenuItem.objects.filter(is_available=True).prefetch_related(
                Prefetch(
                    "modifier_groups",
                    queryset=ModifierGroup.objects.prefetch_related(available_modifiers),
                )
            ),
        )
        categories = Category.objects.filter(is_active=True).prefetch_related(available_items)

        menu = []
        for category in categories:
            menu.append(
                {
                    "id": category.id,
                    "name": category.name,
                    "description": category.description,
                    "items": [self._serialize_item(item) for item in category.menu_items.all()],
                }
            )
        logger.info(f"Built public menu with {len(menu)} categories")
        return menu

    @staticmethod
    def _serialize_item(item):
        return {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "price": str(item.price),
            "preparation_time": item.preparation_time,
            "modifier_groups": [
                {
                    "id": group.id,
                    "name": group.name,
                    "is_required": group.is_required,
                    "min_selections": group.min_selections,
                    "max_selections": group.max_selections,
                    "modifiers": [
                        {
                            "id": modifier.id,
                            "name": modifier.name,
                            "price_adjustment": str(modifier.price_adjustment),
                            "is_default": modifier.is_default,
                        }
                        for modifier in group.modifiers.all()
                    ],
                }
                for group in item.modifier_groups.all()
            ],
        }
