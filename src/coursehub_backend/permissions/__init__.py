"""
Permission system for the course marketplace.

Main components:
- principal: the authenticated actor (user id + role)
- entitlements: ordered access rules for courses and lessons
- auth: FastAPI dependencies turning bearer tokens into principals
"""

from .principal import Principal
from .entitlements import (
    AccessReason,
    Entitlement,
    EntitlementEvaluator,
    CONTENT_ACCESS_RULES,
    require,
)

__all__ = [
    'Principal',
    'AccessReason',
    'Entitlement',
    'EntitlementEvaluator',
    'CONTENT_ACCESS_RULES',
    'require',
]
