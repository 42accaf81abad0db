"""Base class and field metadata for tile types.

A tile type declares its fields once at class level. ``validate`` runs the
checks implied by that metadata and then ``validate_extra`` for rules that span
several fields. ``render`` must route every interpolated value through the
helpers in ``infohub.escaping``; client behaviour is attached by the type's
init function reading ``data-*`` attributes, never by inline handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from infohub import escaping

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")

DEFAULT_MAX_LENGTH = {"text": 200, "textarea": 5000, "email": 254, "tel": 40}


@dataclass(frozen=True)
class Field:
    name: str
    kind: str
    label: str
    required: bool = False
    default: Any = None
    options: tuple[tuple[str, str], ...] = ()
    placeholder: str = ""
    hint: str = ""
    max_length: int | None = None
    minimum: float | None = None
    maximum: float | None = None
    extensions: tuple[str, ...] = ()
    allow_relative: bool = True
    group: str = ""

    @property
    def length_limit(self) -> int | None:
        if self.max_length is not None:
            return self.max_length
        return DEFAULT_MAX_LENGTH.get(self.kind)

    def meta(self) -> dict[str, Any]:
        meta: dict[str, Any] = {"type": self.kind, "label": self.label, "required": self.required}
        if self.default is not None:
            meta["default"] = self.default
        if self.options:
            meta["options"] = {value: label for value, label in self.options}
        if self.placeholder:
            meta["placeholder"] = self.placeholder
        if self.hint:
            meta["hint"] = self.hint
        if self.length_limit is not None and self.kind in ("text", "textarea"):
            meta["maxLength"] = self.length_limit
        if self.minimum is not None:
            meta["min"] = self.minimum
        if self.maximum is not None:
            meta["max"] = self.maximum
        if self.extensions:
            meta["accept"] = ",".join(f".{ext}" for ext in self.extensions)
        if self.group:
            meta["group"] = self.group
        return meta


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def text_of(data: Mapping[str, Any], name: str, default: str = "") -> str:
    value = data.get(name)
    if value is None:
        return default
    return str(value)


def flag(data: Mapping[str, Any], name: str, default: bool) -> bool:
    value = data.get(name)
    if value is None:
        return default
    return bool(value)


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _check_field(field_def: Field, value: Any) -> list[str]:
    label = field_def.label
    if is_blank(value):
        if field_def.required:
            return [f"{label} is required"]
        return []

    kind = field_def.kind
    if kind == "checkbox":
        return [] if isinstance(value, bool) else [f"{label} must be true or false"]

    if kind == "number":
        number = _as_number(value)
        if number is None:
            return [f"{label} must be a number"]
        if field_def.minimum is not None and number < field_def.minimum:
            if field_def.maximum is None:
                return [f"{label} must be at least {field_def.minimum:g}"]
            return [f"{label} must be between {field_def.minimum:g} and {field_def.maximum:g}"]
        if field_def.maximum is not None and number > field_def.maximum:
            if field_def.minimum is None:
                return [f"{label} must be at most {field_def.maximum:g}"]
            return [f"{label} must be between {field_def.minimum:g} and {field_def.maximum:g}"]
        return []

    if kind == "select" and isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return [f"{label} must be text"]

    errors: list[str] = []
    limit = field_def.length_limit
    if limit is not None and len(value) > limit:
        errors.append(f"{label} must be at most {limit} characters")

    if kind == "select":
        allowed = [option for option, _ in field_def.options]
        if value not in allowed:
            errors.append(f"Invalid {label.lower()}")
    elif kind == "url":
        ok = escaping.is_valid_url(value) or (field_def.allow_relative and escaping.is_valid_path(value))
        if not ok:
            errors.append(f"Invalid {label.lower()}")
    elif kind in ("image", "file"):
        if not escaping.is_valid_path(value):
            errors.append(f"Invalid {label.lower()} path")
        elif field_def.extensions and not escaping.has_allowed_extension(value, field_def.extensions):
            errors.append(f"Invalid {label.lower()} format")
    elif kind == "date":
        if not escaping.is_valid_date(value):
            errors.append(f"Invalid date format for {label.lower()} (YYYY-MM-DD expected)")
    elif kind == "time":
        if not escaping.is_valid_time(value):
            errors.append(f"Invalid time format for {label.lower()} (HH:MM expected)")
    elif kind == "email":
        if not escaping.is_valid_email(value):
            errors.append(f"Invalid {label.lower()}")
    return errors


class TileType:
    key: ClassVar[str] = ""
    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    fields: ClassVar[tuple[Field, ...]] = ()
    # Some layouts only make sense across the whole grid row.
    forced_size: ClassVar[str | None] = None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field_meta(self) -> dict[str, dict[str, Any]]:
        return {f.name: f.meta() for f in self.fields}

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "fields": self.field_names(),
            "fieldMeta": self.field_meta(),
        }

    def validate(self, data: Any) -> list[str]:
        if not isinstance(data, Mapping):
            return ["Tile data must be an object"]

        errors: list[str] = []
        for field_def in self.fields:
            errors.extend(_check_field(field_def, data.get(field_def.name)))
        errors.extend(self.validate_extra(data))
        return errors

    def validate_extra(self, data: Mapping[str, Any]) -> list[str]:
        return []

    def render(self, data: Mapping[str, Any]) -> str:
        raise NotImplementedError

    def css(self) -> str:
        return ""

    def js(self) -> str:
        return ""

    def init_function(self) -> str | None:
        return None

    def wrapper_classes(self, data: Mapping[str, Any]) -> list[str]:
        return []

    def title_html(self, data: Mapping[str, Any], *, default_show: bool, css_class: str = "") -> str:
        title = text_of(data, "title").strip()
        if not title or not flag(data, "showTitle", default_show):
            return ""
        class_attr = f' class="{css_class}"' if css_class else ""
        return f"<h3{class_attr}>{escaping.esc(title)}</h3>\n"
