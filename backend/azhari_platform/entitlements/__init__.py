"""
Subscription-based content access control.

This module provides:
- SubscriptionStore: row access used by the evaluator and the expiry job
- EntitlementService: has_access / check_access for a user and a subject
- EntitlementUnknownError: raised (fail-closed) when the store is unreachable
"""

from azhari_platform.entitlements.errors import EntitlementUnknownError
from azhari_platform.entitlements.service import EntitlementService
from azhari_platform.entitlements.store import SubscriptionStore

__all__ = [
    "EntitlementUnknownError",
    "EntitlementService",
    "SubscriptionStore",
]
