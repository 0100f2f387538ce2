"""
Category, stage, grade and section vocabulary.

The registration form stores a teacher's subject as an Arabic label: sometimes
a grouped category ("المواد العربية"), sometimes a single subject ("فيزياء").
The subject catalog stores a category key plus, for the science and literary
groups and the languages, an exact subject name. This module holds the fixed
mapping between the two.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from azhari_platform.platform.errors import ConfigurationError

logger = logging.getLogger(__name__)

CATEGORY_KEYS = ("arabic", "sharia", "science", "literary", "english", "french", "studies")

STAGES = ("preparatory", "secondary")
GRADES = ("first", "second", "third")
SECTIONS = ("scientific", "literary")


@dataclass(frozen=True)
class SubjectFilter:
    """How a selection is matched against the subject catalog."""

    category_key: str
    subject_name: Optional[str] = None

    def matches(self, category: str, name: str) -> bool:
        if category != self.category_key:
            return False
        return self.subject_name is None or name == self.subject_name


# Short label on the form -> subject name as stored in the catalog
NAME_FIXUPS: Dict[str, str] = {
    "أحياء": "الأحياء",
    "فيزياء": "الفيزياء",
    "كيمياء": "الكيمياء",
    "جيولوجيا": "الجيولوجيا",
    "رياضيات": "الرياضيات",
    "تاريخ": "التاريخ",
    "جغرافيا": "الجغرافيا",
    "فلسفة": "الفلسفة",
    "لغة إنجليزية": "اللغة الإنجليزية",
    "لغة فرنسية": "اللغة الفرنسية",
    "فرنساوي": "اللغة الفرنسية",
}

# Preparatory science and studies are single catalog categories
_GROUPED_LABELS: Dict[str, str] = {
    "المواد العربية": "arabic",
    "المواد الشرعية": "sharia",
    "علوم": "science",
    "دراسات": "studies",
}

_LANGUAGE_LABELS: Dict[str, str] = {
    "لغة إنجليزية": "english",
    "لغة فرنسية": "french",
    "فرنساوي": "french",
}

_SCIENCE_LABELS = ("أحياء", "فيزياء", "كيمياء", "جيولوجيا", "رياضيات")
_LITERARY_LABELS = ("تاريخ", "جغرافيا", "فلسفة", "علم نفس")

CATEGORY_DISPLAY_LABELS: Dict[str, str] = {
    "arabic": "المواد العربية",
    "sharia": "المواد الشرعية",
    "science": "العلوم",
    "studies": "الدراسات",
    "literary": "المواد الأدبية",
    "english": "الإنجليزية",
    "french": "الفرنسية",
}

STAGE_LABELS: Dict[str, str] = {
    "preparatory": "المرحلة الإعدادية",
    "secondary": "المرحلة الثانوية",
}

GRADE_LABELS: Dict[str, str] = {
    "first": "الصف الأول",
    "second": "الصف الثاني",
    "third": "الصف الثالث",
}

SECTION_LABELS: Dict[str, str] = {
    "scientific": "علمي",
    "literary": "أدبي",
}

_ARABIC_ORDINALS = (
    ("الأول", "first"),
    ("الثاني", "second"),
    ("الثالث", "third"),
)


def subject_filter_from_selection(selection: Optional[str]) -> Optional[SubjectFilter]:
    """
    Map a form label (or an existing category key) to a catalog filter.

    Returns None for empty or unknown labels. None is a null filter: callers
    must treat it as "matches nothing", never as "matches everything".
    """
    raw = (selection or "").strip()
    if not raw:
        return None

    if raw in CATEGORY_KEYS:
        return SubjectFilter(category_key=raw)

    if raw in _GROUPED_LABELS:
        return SubjectFilter(category_key=_GROUPED_LABELS[raw])

    if raw in _LANGUAGE_LABELS:
        return SubjectFilter(category_key=_LANGUAGE_LABELS[raw], subject_name=NAME_FIXUPS[raw])

    if raw in _SCIENCE_LABELS:
        return SubjectFilter(category_key="science", subject_name=NAME_FIXUPS.get(raw, raw))

    if raw in _LITERARY_LABELS:
        return SubjectFilter(category_key="literary", subject_name=NAME_FIXUPS.get(raw, raw))

    return None


def require_subject_filter(selection: Optional[str]) -> SubjectFilter:
    """Like subject_filter_from_selection, but an unmapped label is a hard error."""
    result = subject_filter_from_selection(selection)
    if result is None:
        logger.error("Unmapped category label", extra={"label": selection})
        raise ConfigurationError(
            "Category label has no catalog mapping",
            details={"label": selection or ""},
        )
    return result


def grade_key_from_label(label_or_key: Optional[str]) -> Optional[str]:
    """'first'/'second'/'third' or an Arabic ordinal label -> grade key."""
    value = (label_or_key or "").strip()
    if value in GRADES:
        return value
    for ordinal, key in _ARABIC_ORDINALS:
        if ordinal in value:
            return key
    return None


def category_display_label(key: Optional[str]) -> str:
    raw = (key or "").strip()
    return CATEGORY_DISPLAY_LABELS.get(raw, raw)


def stage_label(stage: Optional[str]) -> str:
    return STAGE_LABELS.get(stage or "", stage or "")


def grade_label(grade: Optional[str]) -> str:
    return GRADE_LABELS.get(grade or "", grade or "")


def section_label(section: Optional[str]) -> str:
    return SECTION_LABELS.get(section or "", section or "")
