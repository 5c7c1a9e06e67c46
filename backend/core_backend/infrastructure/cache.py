from django.core.cache import caches
from django.conf import settings
import logging

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """
    Explicit key -> value cache with per-entry expiry.

    Wraps one Django cache alias so components receive the cache as a
    collaborator instead of reaching for a module-level singleton. Keys are
    namespaced and versioned so a deploy can bust everything by bumping
    ``CACHE_VERSION``.
    """

    def __init__(self, namespace, default_ttl=300, cache_name="default", backend=None):
        self.namespace = namespace
        self.default_ttl = default_ttl
        self.cache_name = cache_name
        self._backend = backend

    @property
    def backend(self):
        if self._backend is None:
            self._backend = caches[self.cache_name]
        return self._backend

    def make_key(self, key):
        version = getattr(settings, "CACHE_VERSION", 1)
        return f"v{version}:{self.namespace}:{key}"

    def get(self, key, default=None):
        value = self.backend.get(self.make_key(key), _MISSING)
        if value is _MISSING:
            logger.debug(f"Cache MISS: {self.namespace}:{key}")
            return default
        logger.debug(f"Cache HIT: {self.namespace}:{key}")
        return value

    def set(self, key, value, ttl=None):
        self.backend.set(self.make_key(key), value, self.default_ttl if ttl is None else ttl)

    def get_or_set(self, key, producer, ttl=None):
        """Return the cached value, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = producer()
            self.set(key, value, ttl)
        return value

    def invalidate(self, key):
        self.backend.delete(self.make_key(key))
        logger.info(f"Invalidated cache key {self.namespace}:{key}")
