"""
Database models for profiles, the subject catalog, subscriptions,
teacher bindings and notifications.
"""

from azhari_platform.models.base import TimestampMixin
from azhari_platform.models.profile import Profile, UserRole
from azhari_platform.models.subject import Subject
from azhari_platform.models.subscription import Subscription
from azhari_platform.models.teacher import (
    StudentTeacherChoice,
    TeacherAssignment,
    TeacherProfile,
    TeacherRequest,
    TeacherRequestStatus,
)
from azhari_platform.models.notification import Notification
from azhari_platform.models.platform_setting import PlatformSetting
from azhari_platform.models.content import (
    AiAdminInstruction,
    AiSource,
    Content,
    ContentType,
)

__all__ = [
    "TimestampMixin",
    "Profile",
    "UserRole",
    "Subject",
    "Subscription",
    "StudentTeacherChoice",
    "TeacherAssignment",
    "TeacherProfile",
    "TeacherRequest",
    "TeacherRequestStatus",
    "Notification",
    "PlatformSetting",
    "AiAdminInstruction",
    "AiSource",
    "Content",
    "ContentType",
]
