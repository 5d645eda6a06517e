"""Merchant rule rows, their verification questions and the public question shape."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ucsfe.model.template import DropdownItem

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


def _typed(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    if key not in data:
        return default
    value = data[key]
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"field `{key}`: expected int, got {type(value).__name__}")
        if not _I32_MIN <= value <= _I32_MAX:
            raise ValueError(f"field `{key}`: integer {value} out of range")
    elif not isinstance(value, kind):
        raise TypeError(f"field `{key}`: expected {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class MerchantRule:
    """A full merchant rule row; the JSON columns are kept raw."""

    id: int
    is_default: int
    merchant_code: str
    operator: str
    ip_retry_limit: int
    account_retry_limit: int
    empty_score: int
    lock_hour: int
    binding_type: str
    passing_score: int
    questions_json: str | None = None
    template_fields_json: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Question:
    """A verification question stored in the merchant's questions JSON."""

    field_id: str = ""
    field_name: str = ""
    field_attribute: str = ""
    field_type: str = ""
    valid: bool = False
    score: int = 0
    accuracy: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Question:
        """Build from the JSON form; missing keys take their defaults."""
        if not isinstance(data, Mapping):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        return cls(
            field_id=_typed(data, "fieldId", str, ""),
            field_name=_typed(data, "fieldName", str, ""),
            field_attribute=_typed(data, "fieldAttribute", str, ""),
            field_type=_typed(data, "fieldType", str, ""),
            valid=_typed(data, "valid", bool, False),
            score=_typed(data, "score", int, 0),
            accuracy=_typed(data, "accuracy", str, ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this question."""
        return {
            "fieldId": self.field_id,
            "fieldName": self.field_name,
            "fieldAttribute": self.field_attribute,
            "fieldType": self.field_type,
            "valid": self.valid,
            "score": self.score,
            "accuracy": self.accuracy,
        }


@dataclass
class MerchantRuleConfig:
    """The slice of a merchant rule used by the verification flow."""

    id: int
    merchant_code: str
    binding_type: str
    passing_score: int
    empty_score: int
    lock_hour: int
    ip_retry_limit: int
    account_retry_limit: int
    questions_json: str | None = None

    def parse_questions(self) -> dict[str, Question]:
        """Parse the questions JSON into a map keyed by field id; raises ValueError."""
        raw = self.questions_json or ""
        if not raw:
            raise ValueError(f"questions field is empty for merchant: {self.merchant_code}")
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            return {key: Question.from_dict(value) for key, value in data.items()}
        except (ValueError, TypeError) as exc:
            raise ValueError(
                f"unmarshal questions failed for merchant {self.merchant_code}: {exc}"
            ) from exc


@dataclass
class QuestionInfo:
    """A question as shown to the player."""

    field_id: str
    field_name: str
    field_attribute: str
    field_type: str
    field_dropdown_list: list[DropdownItem] | None = None

    def to_dict(self) -> dict[str, Any]:
        """The JSON form; the dropdown list is left out when absent or empty."""
        result: dict[str, Any] = {
            "fieldId": self.field_id,
            "fieldName": self.field_name,
            "fieldAttribute": self.field_attribute,
            "fieldType": self.field_type,
        }
        if self.field_dropdown_list:
            result["fieldDropdownList"] = [item.to_dict() for item in self.field_dropdown_list]
        return result