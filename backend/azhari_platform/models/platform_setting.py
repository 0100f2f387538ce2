"""Key/value platform settings edited from the admin settings page."""

from sqlalchemy import Column, String, Text

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin


class PlatformSetting(Base, TimestampMixin):
    __tablename__ = "platform_settings"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
