from core_backend.exceptions import NotFoundError, ValidationFailed


class MenuItemNotFound(NotFoundError):
    default_code = "menu_item_not_found"
    default_message = "Menu item not found."


class ModifierNotFound(NotFoundError):
    default_code = "modifier_not_found"
    default_message = "Modifier not found."


class MenuItemUnavailable(ValidationFailed):
    default_code = "menu_item_unavailable"
    default_message = "Menu item is not available."


class ModifierUnavailable(ValidationFailed):
    default_code = "modifier_unavailable"
    default_message = "Modifier is not available."


class ModifierMismatch(ValidationFailed):
    default_code = "modifier_mismatch"
    default_message = "Modifier does not belong to this menu item."


class InsufficientSelections(ValidationFailed):
    default_code = "insufficient_selections"
    default_message = "Not enough modifiers selected."


class TooManySelections(ValidationFailed):
    default_code = "too_many_selections"
    default_message = "Too many modifiers selected."
