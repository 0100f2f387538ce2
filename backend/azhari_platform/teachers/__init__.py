"""
Teacher selection and registration.

- categories: form label -> catalog category mapping and Arabic labels
- TeacherChoiceResolver: eligible teachers and the student's binding choice
- TeacherRegistrationService: request / approve / reject workflow
"""

from azhari_platform.teachers.categories import (
    SubjectFilter,
    require_subject_filter,
    subject_filter_from_selection,
)
from azhari_platform.teachers.registration import (
    TeacherRegistrationForm,
    TeacherRegistrationService,
)
from azhari_platform.teachers.resolver import Choice, TeacherChoiceResolver, TeacherInfo

__all__ = [
    "SubjectFilter",
    "require_subject_filter",
    "subject_filter_from_selection",
    "TeacherRegistrationForm",
    "TeacherRegistrationService",
    "Choice",
    "TeacherChoiceResolver",
    "TeacherInfo",
]
