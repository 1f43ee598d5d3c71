"""
Nullability evidence and its collapse to a boolean.
"""

from enum import Enum
from typing import Iterable, Optional

DEFAULT_NULLABILITY = False


class Nullability(Enum):
    NOT_NULL = "not_null"
    NULLABLE = "nullable"
    ABSENT = "absent"


NOT_NULL_ANNOTATIONS = {
    "org.jetbrains.annotations.NotNull",
    "androidx.annotation.NonNull",
    "android.support.annotation.NonNull",
}

NULLABLE_ANNOTATIONS = {
    "org.jetbrains.annotations.Nullable",
    "androidx.annotation.Nullable",
    "android.support.annotation.Nullable",
}


def _annotation_name(annotation: str) -> str:
    """Accept both 'Lorg/jetbrains/annotations/NotNull;' and dotted names."""
    if annotation.startswith("L") and annotation.endswith(";"):
        return annotation[1:-1].replace("/", ".")
    return annotation


def annotation_nullability(annotation: Optional[str]) -> Nullability:
    """Nullability signalled by a single annotation type."""
    if annotation is None:
        return Nullability.ABSENT
    name = _annotation_name(annotation)
    if name in NOT_NULL_ANNOTATIONS:
        return Nullability.NOT_NULL
    if name in NULLABLE_ANNOTATIONS:
        return Nullability.NULLABLE
    return Nullability.ABSENT


def nullability_of(annotations: Optional[Iterable[str]]) -> Nullability:
    """First annotation with an opinion wins.

    Conflicting entries (both NotNull and Nullable) are resolved purely by
    declaration order.
    """
    if annotations is None:
        return Nullability.ABSENT
    for annotation in annotations:
        result = annotation_nullability(annotation)
        if result is not Nullability.ABSENT:
            return result
    return Nullability.ABSENT


def resolve_nullability(evidence: Optional[Nullability]) -> bool:
    if evidence is Nullability.NULLABLE:
        return True
    if evidence is Nullability.NOT_NULL:
        return False
    return DEFAULT_NULLABILITY
