"""Template field models stored as JSON in the template configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_MISSING = object()
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    return data


def _typed(data: Mapping[str, Any], key: str, kind: type, default: Any = _MISSING) -> Any:
    if key not in data:
        if default is _MISSING:
            raise ValueError(f"missing field `{key}`")
        return default
    value = data[key]
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"field `{key}`: expected int, got {type(value).__name__}")
        if not _I64_MIN <= value <= _I64_MAX:
            raise ValueError(f"field `{key}`: integer {value} out of range")
    elif not isinstance(value, kind):
        raise TypeError(f"field `{key}`: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _items(data: Mapping[str, Any], key: str, item_cls: Any) -> list[Any]:
    return [item_cls.from_dict(item) for item in _typed(data, key, list, [])]


@dataclass
class DropdownItem:
    """One option of a dropdown field."""

    dropdown_value: str = ""
    dropdown_id: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DropdownItem:
        """Build from the JSON form; missing keys take their defaults."""
        data = _object(data)
        return cls(
            dropdown_value=_typed(data, "dropdownValue", str, ""),
            dropdown_id=_typed(data, "dropdownId", int, 0),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this option."""
        return {"dropdownValue": self.dropdown_value, "dropdownId": self.dropdown_id}


@dataclass
class TemplateField:
    """A field of a template.

    ``field_attribute`` is ``"DD"`` (dropdown), ``"I"`` (input) or ``"D"`` (date);
    ``created_at`` is a Unix timestamp in milliseconds.
    """

    field_id: str = ""
    field_name: str = ""
    field_attribute: str = ""
    field_type: str = ""
    dropdown_list: list[DropdownItem] = field(default_factory=list)
    format_max: int = 0
    format_min: int = 0
    format: Any = None
    is_fe_display: bool = False
    is_fe_display_enabled: bool = False
    is_player_editable: bool = False
    is_player_editable_enabled: bool = False
    is_required: bool = False
    is_required_enabled: bool = False
    is_unique: bool = False
    is_unique_enabled: bool = False
    kyc_verification: bool = False
    status: str = ""
    created_by: str = ""
    created_at: int = 0
    updated_by: Any = None
    updated_at: Any = None
    custom_display_name: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TemplateField:
        """Build from the JSON form; missing keys take their defaults."""
        data = _object(data)
        return cls(
            field_id=_typed(data, "fieldId", str, ""),
            field_name=_typed(data, "fieldName", str, ""),
            field_attribute=_typed(data, "fieldAttribute", str, ""),
            field_type=_typed(data, "fieldType", str, ""),
            dropdown_list=_items(data, "fieldDropdownList", DropdownItem),
            format_max=_typed(data, "formatMax", int, 0),
            format_min=_typed(data, "formatMin", int, 0),
            format=data.get("format"),
            is_fe_display=_typed(data, "isFeDisplay", bool, False),
            is_fe_display_enabled=_typed(data, "isFeDisplayEnabled", bool, False),
            is_player_editable=_typed(data, "isPlayerEditable", bool, False),
            is_player_editable_enabled=_typed(data, "isPlayerEditableEnabled", bool, False),
            is_required=_typed(data, "isRequired", bool, False),
            is_required_enabled=_typed(data, "isRequiredEnabled", bool, False),
            is_unique=_typed(data, "isUnique", bool, False),
            is_unique_enabled=_typed(data, "isUniqueEnabled", bool, False),
            kyc_verification=_typed(data, "kycVerification", bool, False),
            status=_typed(data, "status", str, ""),
            created_by=_typed(data, "createdBy", str, ""),
            created_at=_typed(data, "createdAt", int, 0),
            updated_by=data.get("updatedBy"),
            updated_at=data.get("updatedAt"),
            custom_display_name=data.get("customDisplayName"),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this field."""
        return {
            "fieldId": self.field_id,
            "fieldName": self.field_name,
            "fieldAttribute": self.field_attribute,
            "fieldType": self.field_type,
            "fieldDropdownList": [item.to_dict() for item in self.dropdown_list],
            "formatMax": self.format_max,
            "formatMin": self.format_min,
            "format": self.format,
            "isFeDisplay": self.is_fe_display,
            "isFeDisplayEnabled": self.is_fe_display_enabled,
            "isPlayerEditable": self.is_player_editable,
            "isPlayerEditableEnabled": self.is_player_editable_enabled,
            "isRequired": self.is_required,
            "isRequiredEnabled": self.is_required_enabled,
            "isUnique": self.is_unique,
            "isUniqueEnabled": self.is_unique_enabled,
            "kycVerification": self.kyc_verification,
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedBy": self.updated_by,
            "updatedAt": self.updated_at,
            "customDisplayName": self.custom_display_name,
        }


@dataclass
class TemplateValue:
    """The ``value`` payload of a template-fields response."""

    template_id: int = 0
    template_name: str = ""
    template_fields: list[TemplateField] = field(default_factory=list)
    is_mobile_country_code_display_enabled: bool = False
    is_fixed_mobile_country_code_enabled: bool = False
    mobile_country_code: Any = None
    remark: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TemplateValue:
        """Build from the JSON form; missing keys take their defaults."""
        data = _object(data)
        return cls(
            template_id=_typed(data, "templateId", int, 0),
            template_name=_typed(data, "templateName", str, ""),
            template_fields=_items(data, "templateFields", TemplateField),
            is_mobile_country_code_display_enabled=_typed(
                data, "isMobileCountryCodeDisplayEnabled", bool, False
            ),
            is_fixed_mobile_country_code_enabled=_typed(
                data, "isFixedMobileCountryCodeEnabled", bool, False
            ),
            mobile_country_code=data.get("mobileCountryCode"),
            remark=data.get("remark"),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this payload."""
        return {
            "templateId": self.template_id,
            "templateName": self.template_name,
            "templateFields": [f.to_dict() for f in self.template_fields],
            "isMobileCountryCodeDisplayEnabled": self.is_mobile_country_code_display_enabled,
            "isFixedMobileCountryCodeEnabled": self.is_fixed_mobile_country_code_enabled,
            "mobileCountryCode": self.mobile_country_code,
            "remark": self.remark,
        }


@dataclass
class TemplateFieldsInfo:
    """Response envelope of the template-fields endpoint."""

    success: bool = False
    value: TemplateValue = field(default_factory=TemplateValue)
    message: str = ""
    error_code: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TemplateFieldsInfo:
        """Build from the JSON form; ``success`` is required, other keys default."""
        data = _object(data)
        value = TemplateValue.from_dict(data["value"]) if "value" in data else TemplateValue()
        return cls(
            success=_typed(data, "success", bool),
            value=value,
            message=_typed(data, "message", str, ""),
            error_code=data.get("errorCode"),
        )

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of this envelope."""
        return {
            "success": self.success,
            "value": self.value.to_dict(),
            "message": self.message,
            "errorCode": self.error_code,
        }


FieldConfigMap = dict[str, dict[str, list[DropdownItem]]]