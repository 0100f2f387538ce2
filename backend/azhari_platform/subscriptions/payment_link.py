"""
WhatsApp deep link shown on the paywall.

Payment is arranged by chat with the platform's sales number; this module
only builds the prefilled message and the wa.me URL from platform_settings.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.platform_setting import PlatformSetting
from azhari_platform.platform.errors import UpstreamUnavailableError
from azhari_platform.teachers.categories import grade_label, section_label, stage_label

logger = logging.getLogger(__name__)

SETTING_KEYS = (
    "subscription_whatsapp",
    "subscription_default_price",
    "subscription_currency",
    "subscription_default_message",
)

DEFAULT_WHATSAPP = "01223909712"
DEFAULT_PRICE = "100"
DEFAULT_CURRENCY = "جنيه"
UNSPECIFIED_SECTION = "غير محدد"

DEFAULT_MESSAGE_TEMPLATE = (
    "مرحبًا، أريد الاشتراك في:\n"
    "المادة: {subject}\n"
    "الصف: {grade}\n"
    "المرحلة: {stage}\n"
    "القسم: {section}\n"
    "ID الطالب: {student_id}"
)

# Same character set JavaScript's encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class SubscriptionSettings:
    whatsapp: str = DEFAULT_WHATSAPP
    price: str = DEFAULT_PRICE
    currency: str = DEFAULT_CURRENCY
    message: str = ""

    @classmethod
    def from_mapping(cls, values: Dict[str, str]) -> "SubscriptionSettings":
        return cls(
            whatsapp=values.get("subscription_whatsapp") or DEFAULT_WHATSAPP,
            price=values.get("subscription_default_price") or DEFAULT_PRICE,
            currency=values.get("subscription_currency") or DEFAULT_CURRENCY,
            message=values.get("subscription_default_message") or "",
        )


@dataclass(frozen=True)
class PaymentLink:
    url: str
    message: str
    price: str
    currency: str


def whatsapp_number(raw: str) -> str:
    """Digits only; a local 0-prefixed number gets the Egyptian country code."""
    digits = re.sub(r"[^0-9]", "", raw or "")
    if digits.startswith("0"):
        return "2" + digits
    return digits


def render_message(
    template: str,
    subject_name: str,
    stage: Optional[str],
    grade: Optional[str],
    section: Optional[str],
    student_ref: str,
) -> str:
    # Each placeholder is substituted once, first occurrence only.
    message = template or DEFAULT_MESSAGE_TEMPLATE
    message = message.replace("{subject}", subject_name or "", 1)
    message = message.replace("{grade}", grade_label(grade), 1)
    message = message.replace("{stage}", stage_label(stage), 1)
    message = message.replace("{section}", section_label(section) or UNSPECIFIED_SECTION, 1)
    message = message.replace("{student_id}", student_ref, 1)
    return message


class PaymentLinkBuilder:
    def __init__(self, db_session: Session):
        self.db = db_session

    def load_settings(self) -> SubscriptionSettings:
        try:
            rows = (
                self.db.query(PlatformSetting)
                .filter(PlatformSetting.key.in_(SETTING_KEYS))
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Failed to load subscription settings", extra={"error": str(e)})
            raise UpstreamUnavailableError("Could not load subscription settings", upstream="database") from e
        return SubscriptionSettings.from_mapping({row.key: row.value for row in rows if row.value})

    def build(
        self,
        subject_name: str,
        stage: Optional[str],
        grade: Optional[str],
        section: Optional[str],
        student_id: str,
        student_code: Optional[str] = None,
        settings: Optional[SubscriptionSettings] = None,
    ) -> PaymentLink:
        settings = settings or self.load_settings()
        message = render_message(
            settings.message,
            subject_name,
            stage,
            grade,
            section,
            student_code or student_id[:8],
        )
        url = (
            f"https://wa.me/{whatsapp_number(settings.whatsapp)}"
            f"?text={quote(message, safe=_URI_COMPONENT_SAFE)}"
        )
        return PaymentLink(url=url, message=message, price=settings.price, currency=settings.currency)
