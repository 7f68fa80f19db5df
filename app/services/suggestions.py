"""
Improvement suggestions attached to ranking results.

Criteria carry an optional ``key`` tag; the tag, not the display name, selects
the canned text. Criteria without a known tag get an explicit generic
suggestion so a renamed criterion never silently changes the advice.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CriterionKey(str, Enum):
    ATTENDANCE = "attendance"
    PUNCTUALITY = "punctuality"
    HOURS_WORKED = "hours_worked"
    MEDICAL_CERTIFICATES = "medical_certificates"
    TRAINING = "training"
    COLLABORATION = "collaboration"


class SuggestionKind(str, Enum):
    TARGETED = "targeted"
    GENERIC = "generic"
    POSITIVE = "positive"


@dataclass(frozen=True)
class Suggestion:
    kind: SuggestionKind
    text: str
    criterion_name: Optional[str] = None


SUGGESTIONS = {
    CriterionKey.ATTENDANCE: "Reduce your absences to improve your score",
    CriterionKey.PUNCTUALITY: "Avoid late arrivals to raise your evaluation",
    CriterionKey.HOURS_WORKED: "Complete your full scheduled working hours",
    CriterionKey.MEDICAL_CERTIFICATES: "Submit your medical certificates correctly",
    CriterionKey.TRAINING: "Take part in more courses and training sessions",
    CriterionKey.COLLABORATION: "Improve your interaction with your team",
}

POSITIVE_FEEDBACK = Suggestion(
    kind=SuggestionKind.POSITIVE,
    text="Keep up your excellent performance!",
)


def resolve_key(key: Optional[str]) -> Optional[CriterionKey]:
    if not key:
        return None
    try:
        return CriterionKey(key.strip().lower())
    except ValueError:
        return None


def suggestion_for(name: str, key: Optional[str] = None) -> Suggestion:
    tag = resolve_key(key)
    if tag is None:
        return Suggestion(
            kind=SuggestionKind.GENERIC,
            text=f"Improve your performance in {name}",
            criterion_name=name,
        )
    return Suggestion(kind=SuggestionKind.TARGETED, text=SUGGESTIONS[tag], criterion_name=name)
