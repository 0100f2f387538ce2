from azhari_platform.subscriptions.admin import SubscriptionAdminService
from azhari_platform.subscriptions.payment_link import PaymentLink, PaymentLinkBuilder

__all__ = ["SubscriptionAdminService", "PaymentLink", "PaymentLinkBuilder"]
