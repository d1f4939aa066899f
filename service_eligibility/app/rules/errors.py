"""
Structural errors raised while evaluating eligibility criteria.

These are data/shape problems in a benefit schema, never business
ineligibility. They are fatal for the (subject, schema) pair being
evaluated and are isolated per entry by the batch runners.
"""

from typing import Any, Dict, List, Optional

from shared.errors import EligibilityServiceError

from ..i18n import translate


class ConditionError(EligibilityServiceError):
    """Base class for condition evaluation errors."""

    message_key = ""

    def __init__(self, code: str, locale: Optional[str] = None,
                 variables: Optional[Dict[str, Any]] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.locale = locale
        super().__init__(code, translate(locale, self.message_key, variables), details)


class InvalidOperatorError(ConditionError):
    """The operator is missing, malformed or not recognised."""


class ConditionRequiredError(InvalidOperatorError):
    message_key = "errors.conditionRequired"

    def __init__(self, locale: Optional[str] = None):
        super().__init__("ConditionRequired", locale)


class InvalidConditionStructureError(InvalidOperatorError):
    message_key = "errors.invalidConditionStructure"

    def __init__(self, locale: Optional[str] = None, condition: Any = None):
        super().__init__("InvalidConditionStructure", locale,
                         details={"condition": repr(condition)})


class UnsupportedConditionError(InvalidOperatorError):
    message_key = "errors.unsupportedCondition"

    def __init__(self, condition: str, locale: Optional[str] = None):
        self.condition = condition
        super().__init__("UnsupportedCondition", locale, {"condition": condition},
                         details={"condition": condition})


class MalformedOperandsError(ConditionError):
    """The operands do not have the shape the operator requires."""


class BetweenRequiresArrayError(MalformedOperandsError):
    message_key = "errors.betweenConditionRequiresArray"

    def __init__(self, locale: Optional[str] = None, operands: Any = None):
        super().__init__("BetweenRequiresArray", locale,
                         details={"operands": repr(operands)})


class InvalidSchemaError(EligibilityServiceError):
    """A benefit-schema document failed structural validation."""

    def __init__(self, locale: Optional[str] = None,
                 errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(
            "InvalidSchemaStructure",
            translate(locale, "errors.invalidSchemaStructure"),
            {"errors": self.errors},
        )
