"""
Entitlement error hierarchy.

Provides:
- EntitlementUnknownError: the store could not be read, so access is unknown
  (fail-closed; never treated as a grant)
"""

from typing import Optional

from azhari_platform.platform.errors import UpstreamUnavailableError


class EntitlementUnknownError(UpstreamUnavailableError):
    """
    Raised when entitlement evaluation could not reach the store.

    Carries a machine-readable error_code so the UI can show a retry prompt
    instead of a paywall.
    """

    def __init__(self, user_id: str, subject_id: str, cause: Optional[Exception] = None):
        self.user_id = user_id
        self.subject_id = subject_id
        self.cause = cause
        super().__init__(
            message="Entitlement could not be determined, please retry",
            upstream="database",
        )
        self.code = "ENTITLEMENT_UNKNOWN"
        self.details["subject_id"] = subject_id
