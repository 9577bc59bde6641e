"""
Adaptateur de cache du catalogue.

Exports:
- CatalogCache: Implementation diskcache du port ICacheGateway
"""

from moviebox.adapters.cache.catalog_cache import CatalogCache

__all__ = ["CatalogCache"]
