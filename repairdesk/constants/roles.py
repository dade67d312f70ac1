"""Role and collection identifiers shared by models, services and routes.
Values must match the documents already stored by the mobile clients; never rename them silently.
"""
from __future__ import annotations

ROLE_ADMIN = 'Admin'
ROLE_TECHNICIAN = 'Tecnico'
ALL_ROLES = (ROLE_ADMIN, ROLE_TECHNICIAN)

# Singleton access configuration row
ACCESS_CONFIG_ID = 'access_codes'

# Placeholder used when a technician's display name cannot be resolved at claim time
UNKNOWN_NAME = 'Unknown'

# Blob store layout for the legacy image path: orders/{orderId}/{randomId}.jpg
BLOB_ORDER_PREFIX = 'orders'
BLOB_IMAGE_EXT = '.jpg'

__all__ = ['ROLE_ADMIN', 'ROLE_TECHNICIAN', 'ALL_ROLES', 'ACCESS_CONFIG_ID', 'UNKNOWN_NAME', 'BLOB_ORDER_PREFIX', 'BLOB_IMAGE_EXT']
