"""Tests for the paywall WhatsApp link."""

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy.exc import OperationalError

from azhari_platform.models import PlatformSetting
from azhari_platform.platform.errors import UpstreamUnavailableError
from azhari_platform.subscriptions.payment_link import (
    DEFAULT_MESSAGE_TEMPLATE,
    PaymentLinkBuilder,
    SubscriptionSettings,
    render_message,
    whatsapp_number,
)


def _text_param(url):
    return parse_qs(urlparse(url).query)["text"][0]


class TestWhatsappNumber:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("01223909712", "201223909712"),
            ("+20 122 390 9712", "201223909712"),
            ("201223909712", "201223909712"),
            ("", ""),
        ],
    )
    def test_normalises_number(self, raw, expected):
        assert whatsapp_number(raw) == expected


class TestRenderMessage:
    def test_default_template_uses_arabic_labels(self):
        message = render_message("", "الفيزياء", "secondary", "first", "scientific", "STU-1001")

        assert message == (
            "مرحبًا، أريد الاشتراك في:\n"
            "المادة: الفيزياء\n"
            "الصف: الصف الأول\n"
            "المرحلة: المرحلة الثانوية\n"
            "القسم: علمي\n"
            "ID الطالب: STU-1001"
        )

    def test_missing_section_is_unspecified(self):
        message = render_message(DEFAULT_MESSAGE_TEMPLATE, "الفقه", "preparatory", "second", None, "abc")

        assert "القسم: غير محدد" in message

    def test_custom_template(self):
        message = render_message("اشتراك {subject} للطالب {student_id}", "النحو", None, None, None, "S-1")

        assert message == "اشتراك النحو للطالب S-1"


class TestPaymentLinkBuilder:
    def test_defaults_when_no_settings_rows(self, db_session):
        link = PaymentLinkBuilder(db_session).build(
            subject_name="الكيمياء",
            stage="secondary",
            grade="third",
            section="scientific",
            student_id="0f8fad5b-d9cb-469f-a165-70867728950e",
        )

        assert link.url.startswith("https://wa.me/201223909712?text=")
        assert link.price == "100"
        assert link.currency == "جنيه"
        assert _text_param(link.url) == link.message
        assert link.message.endswith("ID الطالب: 0f8fad5b")

    def test_student_code_preferred_over_id(self, db_session):
        link = PaymentLinkBuilder(db_session).build(
            subject_name="الكيمياء",
            stage="secondary",
            grade="third",
            section=None,
            student_id="0f8fad5b-d9cb",
            student_code="AZ-77",
        )

        assert link.message.endswith("ID الطالب: AZ-77")

    def test_settings_rows_override_defaults(self, db_session):
        db_session.add_all([
            PlatformSetting(key="subscription_whatsapp", value="0100 000 0000"),
            PlatformSetting(key="subscription_default_price", value="150"),
            PlatformSetting(key="subscription_currency", value="EGP"),
            PlatformSetting(key="subscription_default_message", value="أريد {subject}"),
        ])
        db_session.commit()

        link = PaymentLinkBuilder(db_session).build("التاريخ", "secondary", "first", "literary", "id-123456789")

        assert link.url.startswith("https://wa.me/201000000000?text=")
        assert link.price == "150"
        assert link.currency == "EGP"
        assert link.message == "أريد التاريخ"

    def test_text_is_percent_encoded(self, db_session):
        link = PaymentLinkBuilder(db_session).build(
            "الفيزياء", "secondary", "first", None, "id",
            settings=SubscriptionSettings(message="a b&c\n"),
        )

        assert link.url.endswith("?text=a%20b%26c%0A")

    def test_settings_read_failure_is_upstream_error(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

        with pytest.raises(UpstreamUnavailableError):
            PaymentLinkBuilder(db).load_settings()
