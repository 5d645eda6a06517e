"""Validation record rows and the per-question answers stored with them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


@dataclass
class ValidationRecord:
    """One row of the validation record table; ``qas`` holds a JSON map of QA answers."""

    id: int | None
    customer_id: int
    customer_name: str
    success: int
    merchant_code: str
    ip: str
    passing_score: int
    score: int
    qas: str
    created_at: datetime


@dataclass
class QA:
    """A player's answer to one question and the score it earned."""

    field_id: str
    field_type: str
    correct: bool
    score: int
    total_score: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QA:
        """Build from the JSON form; every key is required."""
        if not isinstance(data, Mapping):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        return cls(
            field_id=_require(data, "fieldId", str),
            field_type=_require(data, "fieldType", str),
            correct=_require(data, "correct", bool),
            score=_require_i32(data, "score"),
            total_score=_require_i32(data, "totalScore"),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this answer."""
        return {
            "fieldId": self.field_id,
            "fieldType": self.field_type,
            "correct": self.correct,
            "score": self.score,
            "totalScore": self.total_score,
        }


QaMap = dict[str, QA]


def _require(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, kind):
        raise TypeError(f"field `{key}`: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _require_i32(data: Mapping[str, Any], key: str) -> int:
    value = _require(data, key, int)
    if isinstance(value, bool):
        raise TypeError(f"field `{key}`: expected int, got bool")
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"field `{key}`: integer {value} out of range")
    return value