"""
OPS Storage — App Configuration
=================================
Persistent stock, loyalty and sequence-counter tables.

This app:
- Owns the three tables behind DjangoOrderStorage
- Enforces non-negativity and uniqueness at the database level

This app does NOT:
- Price orders
- Decide stock deltas
- Retry conflicting writes
"""

from django.apps import AppConfig


class OrderStorageConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.storage"
    label = "order_storage"
    verbose_name = "OPS Order Storage"
