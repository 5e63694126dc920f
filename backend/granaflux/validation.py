from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from granaflux.errors import ValidationError
from granaflux.money import to_cents
from granaflux.time_utils import parse_iso_datetime

# Maximum money value: R$ 9.999.999,99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999

TEXT = "text"
INTEGER = "integer"
MONEY = "money"
ENUM = "enum"
EMAIL = "email"
DATETIME = "datetime"
COLOR = "color"
REFERENCE = "reference"
NUMBER = "number"

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(frozen=True)
class FieldRule:
    kind: str
    attr: str | None = None
    required: bool = False
    nullable: bool = True
    choices: tuple[str, ...] = ()
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    message: str | None = None
    strip: bool = True


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - fields: wire name (camelCase) -> FieldRule; anything else in the payload is ignored
    - required fields are enforced on create only (partial=False)
    """
    fields: dict[str, FieldRule] = field(default_factory=dict)


class FieldErrors:
    """Accumulates per-field messages so a single response can list all of them."""

    def __init__(self):
        self.errors: list[dict] = []

    def add(self, field_name: str, message: str) -> None:
        self.errors.append({"field": field_name, "message": message})

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


class _Invalid(Exception):
    pass


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _coerce_int(value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if re.fullmatch(r"-?\d+", stripped):
            return int(stripped)
    raise _Invalid("deve ser um número inteiro")


def _coerce(rule: FieldRule, value: Any) -> Any:
    kind = rule.kind

    if kind == TEXT:
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise _Invalid("deve ser um texto")
        text = str(value).strip() if rule.strip else str(value)
        if rule.required and not text.strip():
            raise _Invalid("é obrigatório")
        if rule.min_length is not None and len(text) < rule.min_length:
            raise _Invalid(f"deve ter pelo menos {rule.min_length} caracteres")
        if rule.max_length is not None and len(text) > rule.max_length:
            raise _Invalid(f"deve ter no máximo {rule.max_length} caracteres")
        return text or None

    if kind == INTEGER:
        number = _coerce_int(value)
        if rule.minimum is not None and number < rule.minimum:
            raise _Invalid(f"deve ser maior ou igual a {int(rule.minimum)}")
        if rule.maximum is not None and number > rule.maximum:
            raise _Invalid(f"deve ser menor ou igual a {int(rule.maximum)}")
        return number

    if kind == REFERENCE:
        number = _coerce_int(value)
        if number < 1:
            raise _Invalid("referência inválida")
        return number

    if kind == MONEY:
        try:
            cents = to_cents(value)
        except ValueError:
            raise _Invalid("deve ser numérico")
        if rule.minimum is not None and cents < rule.minimum * 100:
            raise _Invalid(f"deve ser maior ou igual a {rule.minimum:g}")
        if abs(cents) > MAX_AMOUNT_CENTS:
            raise _Invalid("valor acima do máximo permitido")
        return cents

    if kind == NUMBER:
        if isinstance(value, bool):
            raise _Invalid("deve ser numérico")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise _Invalid("deve ser numérico")
        if rule.minimum is not None and number < rule.minimum:
            raise _Invalid(f"deve ser maior ou igual a {rule.minimum:g}")
        if rule.maximum is not None and number > rule.maximum:
            raise _Invalid(f"deve ser menor ou igual a {rule.maximum:g}")
        return number

    if kind == ENUM:
        text = str(value).strip().upper()
        if text not in rule.choices:
            raise _Invalid(f"deve ser um de: {', '.join(rule.choices)}")
        return text

    if kind == EMAIL:
        text = str(value).strip().lower()
        if not EMAIL_RE.match(text):
            raise _Invalid("email inválido")
        return text

    if kind == COLOR:
        text = str(value).strip()
        if not COLOR_RE.match(text):
            raise _Invalid("deve estar no formato hexadecimal (#RRGGBB)")
        return text.upper()

    if kind == DATETIME:
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise _Invalid("data inválida")
        try:
            dt = parse_iso_datetime(value)
        except ValueError:
            raise _Invalid("data inválida")
        if dt is None:
            raise _Invalid("data inválida")
        return dt

    return value


def coerce_field(field_name: str, value: Any, rule: FieldRule, errors: FieldErrors) -> Any:
    """
    Validate and normalize a single value; records a message in `errors` and
    returns None when the value is rejected.
    """
    if value is None or (isinstance(value, str) and not value.strip() and rule.kind != TEXT):
        if rule.required or not rule.nullable:
            errors.add(field_name, rule.message or f"{field_name} é obrigatório")
        return None
    try:
        return _coerce(rule, value)
    except _Invalid as exc:
        errors.add(field_name, rule.message or f"{field_name} {exc}")
        return None


def validate_payload(
    *,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against a policy.
    Returns a cleaned patch dict keyed by model attribute name.

    partial=False: create semantics (enforce required fields)
    partial=True: patch semantics (validate only provided keys)

    Raises ValidationError listing every violated field.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError([{"field": "body", "message": "JSON inválido"}])

    errors = FieldErrors()
    patch: dict = {}

    for name, rule in policy.fields.items():
        attr = rule.attr or camel_to_snake(name)
        if name not in payload:
            if rule.required and not partial:
                errors.add(name, rule.message or f"{name} é obrigatório")
            continue
        value = coerce_field(name, payload[name], rule, errors)
        if value is None and (rule.required or not rule.nullable):
            continue
        patch[attr] = value

    errors.raise_if_any()
    return patch


def query_int(args, name: str, *, minimum: int | None = None, maximum: int | None = None) -> int | None:
    """Lenient query-string integer: absent or malformed values are treated as not provided."""
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    if minimum is not None and value < minimum:
        return None
    if maximum is not None and value > maximum:
        return None
    return value


def query_datetime(args, name: str) -> datetime | None:
    raw = args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_datetime(raw)
    except ValueError:
        raise ValidationError([{"field": name, "message": f"{name} data inválida"}])
