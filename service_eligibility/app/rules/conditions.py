"""
Condition evaluation: operator resolution, type coercion and comparison.

A condition compares one subject value with the operand(s) of a criterion.
Before comparing, both sides are coerced to a single comparison type that
is inferred from the operands:

- a numeric operand (``18``, ``"18"``, ``true``) compares numerically,
  with null and blank values reading as 0,
- the literal strings ``"true"`` / ``"false"`` compare by truthiness, so any
  non-empty string (``"false"`` included) is true,
- anything else compares as lower-cased text, so string comparisons are
  case-insensitive.

Sequence subject values are reduced to their first element for every
operator; ``in`` coerces each operand element and tests membership.
"""

import math
import operator as _op
import re
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import (
    BetweenRequiresArrayError,
    ConditionRequiredError,
    InvalidConditionStructureError,
    UnsupportedConditionError,
)
from .models import (
    ComparisonType,
    ConditionOperator,
    NestedWrappedOperator,
    OperatorSpec,
    PlainOperator,
    WrappedOperator,
)

_IGNORED_CHARACTERS = re.compile(r"[\s_]+")
_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

OPERATOR_ALIASES: Dict[str, ConditionOperator] = {
    "equals": ConditionOperator.EQUALS,
    "equal": ConditionOperator.EQUALS,
    "=": ConditionOperator.EQUALS,
    "==": ConditionOperator.EQUALS,
    "in": ConditionOperator.IN,
    "includes": ConditionOperator.IN,
    "gte": ConditionOperator.GTE,
    ">=": ConditionOperator.GTE,
    "greaterthanequal": ConditionOperator.GTE,
    "greaterthanequals": ConditionOperator.GTE,
    "lte": ConditionOperator.LTE,
    "<=": ConditionOperator.LTE,
    "lessthanequal": ConditionOperator.LTE,
    "lessthanequals": ConditionOperator.LTE,
    "gt": ConditionOperator.GT,
    ">": ConditionOperator.GT,
    "greaterthan": ConditionOperator.GT,
    "lt": ConditionOperator.LT,
    "<": ConditionOperator.LT,
    "lessthan": ConditionOperator.LT,
    "between": ConditionOperator.BETWEEN,
}

_COMPARATORS: Dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: _op.eq,
    ConditionOperator.GTE: _op.ge,
    ConditionOperator.LTE: _op.le,
    ConditionOperator.GT: _op.gt,
    ConditionOperator.LT: _op.lt,
}

_OPERATOR_SPECS = (PlainOperator, WrappedOperator, NestedWrappedOperator)


def parse_operator_spec(raw: Any, locale: Optional[str] = None) -> OperatorSpec:
    """Classify a raw operator into its tagged shape."""
    if isinstance(raw, _OPERATOR_SPECS):
        return raw
    if raw is None or raw == "":
        raise ConditionRequiredError(locale)
    if isinstance(raw, str):
        return PlainOperator(raw)
    if isinstance(raw, Mapping):
        condition = raw.get("condition")
        if condition:
            if not isinstance(condition, str):
                raise InvalidConditionStructureError(locale, raw)
            return WrappedOperator(condition)

        nested = raw.get("criteria")
        if isinstance(nested, Mapping) and isinstance(nested.get("condition"), str) and nested["condition"]:
            return NestedWrappedOperator(nested["condition"])

    raise InvalidConditionStructureError(locale, raw)


def normalize_operator(text: str) -> str:
    """Lower-case, trim, and drop whitespace and underscores."""
    return _IGNORED_CHARACTERS.sub("", text.strip().lower())


def resolve_operator(raw: Any, locale: Optional[str] = None) -> ConditionOperator:
    """Resolve a raw operator (string, mapping or parsed shape) to its canonical form."""
    if isinstance(raw, ConditionOperator):
        return raw

    spec = parse_operator_spec(raw, locale)
    text = spec.text if isinstance(spec, PlainOperator) else spec.condition
    normalized = normalize_operator(text)
    if not normalized:
        raise ConditionRequiredError(locale)

    try:
        return OPERATOR_ALIASES[normalized]
    except KeyError:
        raise UnsupportedConditionError(normalized, locale) from None


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _parse_number(value: Any) -> Optional[float]:
    """Numeric reading of a scalar, or None when it has none.

    Null and blank strings read as 0. Text must be a plain finite decimal;
    ``"inf"``, ``"nan"`` and ``"1_000"`` are not numbers.
    """
    if value is None:
        return 0.0
    if isinstance(value, (bool, int)):
        return float(value)
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if not _DECIMAL.match(text):
            return None
        return float(text)
    return None


def infer_comparison_type(operands: Any) -> ComparisonType:
    """Infer the comparison type from the (first) operand."""
    value = _first(operands)
    if value is None or value == "":
        return ComparisonType.TEXT
    if _parse_number(value) is not None:
        return ComparisonType.NUMBER
    if value in ("true", "false"):
        return ComparisonType.BOOLEAN
    return ComparisonType.TEXT


def to_number(value: Any) -> float:
    number = _parse_number(value)
    # A fresh NaN per call: list membership checks identity before equality.
    return number if number is not None else float("nan")


def to_boolean(value: Any) -> bool:
    return bool(value)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).lower()


_CONVERTERS: Dict[ComparisonType, Callable[[Any], Any]] = {
    ComparisonType.NUMBER: to_number,
    ComparisonType.BOOLEAN: to_boolean,
    ComparisonType.TEXT: to_text,
}


def coerce(value: Any, comparison_type: ComparisonType) -> Any:
    """Coerce a value (first element of a sequence) to the comparison type."""
    return _CONVERTERS[comparison_type](_first(value))


def evaluate_condition(subject_value: Any, operator: Any, operands: Any,
                       locale: Optional[str] = None) -> bool:
    """Decide whether ``subject_value`` satisfies ``operator`` against ``operands``.

    Raises:
        ConditionRequiredError: the operator is missing or empty.
        InvalidConditionStructureError: a mapping operator has no usable condition.
        UnsupportedConditionError: the operator is not recognised.
        BetweenRequiresArrayError: ``between`` did not receive exactly two operands.
    """
    condition = resolve_operator(operator, locale)
    comparison_type = infer_comparison_type(operands)
    subject = coerce(subject_value, comparison_type)

    if condition is ConditionOperator.IN:
        if not isinstance(operands, (list, tuple)):
            return False
        return subject in [coerce(value, comparison_type) for value in operands]

    if condition is ConditionOperator.BETWEEN:
        if not isinstance(operands, (list, tuple)) or len(operands) != 2:
            raise BetweenRequiresArrayError(locale, operands)
        minimum, maximum = (coerce(value, comparison_type) for value in operands)
        return minimum <= subject <= maximum

    return _COMPARATORS[condition](subject, coerce(operands, comparison_type))
