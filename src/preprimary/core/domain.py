"""Domain vocabulary shared by storage, API and reports.

Values are stored and transmitted exactly as their display labels
("Slow Learner", "Needs Improvement"), matching what teachers type on
paper records.
"""

from __future__ import annotations

from enum import Enum


class ClassLevel(str, Enum):
    """School cohort."""

    NURSERY = "Nursery"
    LKG = "LKG"
    UKG = "UKG"


class LearningAbility(str, Enum):
    TALENTED = "Talented"
    AVERAGE = "Average"
    SLOW_LEARNER = "Slow Learner"


class WritingSpeed(str, Enum):
    """Writing speed. Not assessed for Nursery."""

    SLOW = "Slow Writing"
    SPEED = "Speed Writing"


class ProgressRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class PlanType(str, Enum):
    ANNUAL = "Annual"
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


# Progress dimensions in display order: (field name, label)
SKILL_FIELDS: list[tuple[str, str]] = [
    ("social_skills", "Social Skills"),
    ("pre_literacy", "Pre-Literacy"),
    ("pre_numeracy", "Pre-Numeracy"),
    ("motor_skills", "Motor Skills"),
    ("emotional_development", "Emotional Development"),
]

# Typical age per class, used in AI prompts and offline suggestions
CLASS_AGES: dict[ClassLevel, int] = {
    ClassLevel.NURSERY: 3,
    ClassLevel.LKG: 4,
    ClassLevel.UKG: 5,
}


def normalize_writing_speed(
    class_level: str | ClassLevel,
    writing_speed: str | WritingSpeed | None,
) -> str | None:
    """Return the writing speed to store for a student of class_level.

    Nursery students are never assessed for writing speed, so any value
    sent for them is dropped.
    """
    if ClassLevel(class_level) is ClassLevel.NURSERY:
        return None
    if writing_speed is None or writing_speed == "":
        return None
    return WritingSpeed(writing_speed).value


def format_enum_value(value: str | Enum | None) -> str:
    """Format a stored value for display ("slow_learner" -> "Slow Learner")."""
    if isinstance(value, Enum):
        value = value.value
    if not value:
        return "N/A"
    if "_" not in value and not value.islower():
        return value
    return " ".join(word[:1].upper() + word[1:] for word in value.split("_"))
