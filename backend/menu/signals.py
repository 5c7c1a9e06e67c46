import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Category, MenuItem, Modifier, ModifierGroup
from .services import CatalogReader

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=Category)
@receiver([post_save, post_delete], sender=MenuItem)
@receiver([post_save, post_delete], sender=ModifierGroup)
@receiver([post_save, post_delete], sender=Modifier)
def invalidate_menu_cache(sender, instance, **kwargs):
    """Any catalog write makes the cached public menu stale."""
    # A read before commit would otherwise re-cache the old tree.
    transaction.on_commit(lambda: CatalogReader().invalidate_public_menu())
