"""
Eligibility evaluation engine.

Walks the criteria of one benefit schema for one subject and folds the
per-criterion outcomes into a Verdict. Every criterion is evaluated, so a
verdict always carries the complete list of failure reasons. The engine is
pure: it neither logs nor mutates its inputs.
"""

from typing import Any, Mapping, Optional, Union

from ..i18n import get_translator
from .conditions import evaluate_condition, resolve_operator
from .documents import DocumentVerifier
from .models import (
    BenefitSchema,
    ConditionOperator,
    Criterion,
    Reason,
    ReasonCode,
    Verdict,
)


def render_value(value: Any) -> str:
    """Human-readable form of a subject value or operand."""
    if isinstance(value, (list, tuple)):
        return ", ".join(render_value(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return "null"
    return str(value)


class EligibilityEngine:
    """Eligibility evaluation engine."""

    def __init__(self, document_verifier: Optional[DocumentVerifier] = None):
        self.document_verifier = document_verifier or DocumentVerifier()

    def evaluate(self, subject: Mapping[str, Any], schema: BenefitSchema,
                 locale: str = "en", strict: bool = False) -> Verdict:
        """Evaluate every criterion of ``schema`` against ``subject``.

        Condition errors (unknown operator, malformed operands) propagate:
        they describe a broken schema, not an ineligible subject.
        """
        reasons = []
        for criterion in schema.criteria:
            reason = self.evaluate_criterion(subject, criterion, locale, strict)
            if reason is not None:
                reasons.append(reason)

        return Verdict.from_reasons(reasons, schema.details)

    def evaluate_criterion(self, subject: Mapping[str, Any], criterion: Criterion,
                           locale: str = "en", strict: bool = False) -> Optional[Reason]:
        """Return the failure reason for one criterion, or None if it passes."""
        _ = get_translator(locale)

        if self._is_missing(subject, criterion.field, strict):
            return Reason(
                code=ReasonCode.MISSING_FIELD,
                category=criterion.category,
                field=criterion.field,
                message=_("reasons.missingField", {"field": criterion.field}),
                description=criterion.description,
            )

        if criterion.required_proof_types and not self.document_verifier.has_valid_document(
            subject, criterion.required_proof_types
        ):
            return Reason(
                code=ReasonCode.DOCUMENT_INVALID,
                category=criterion.category,
                field=criterion.field,
                message=_("reasons.documentInvalid", {"description": criterion.description}),
                description=criterion.description,
                required_documents=criterion.required_proof_types,
            )

        condition = resolve_operator(criterion.condition, locale)
        observed = subject[criterion.field]
        if evaluate_condition(observed, condition, criterion.operands, locale):
            return None

        requirement = self._describe_requirement(condition, criterion.operands, observed, locale)
        return Reason(
            code=ReasonCode.CRITERION_NOT_MET,
            category=criterion.category,
            field=criterion.field,
            message=_("reasons.criterionNotMet", {
                "category": criterion.category.value,
                "requirement": requirement,
            }),
            description=criterion.description,
            observed_value=observed,
            required_value=criterion.operands,
            operator=condition,
        )

    def _is_missing(self, subject: Mapping[str, Any], field: str, strict: bool) -> bool:
        if field not in subject:
            return True
        return strict and subject[field] is None

    def _describe_requirement(self, condition: ConditionOperator, operands: Any,
                              observed: Any, locale: str) -> str:
        """Render e.g. ``Required: >= 18, Got: 16``."""
        _ = get_translator(locale)
        variables = {
            "required": render_value(operands),
            "observed": render_value(observed),
        }
        if condition is ConditionOperator.BETWEEN:
            variables["minimum"] = render_value(operands[0])
            variables["maximum"] = render_value(operands[1])
        return _(f"reasons.required.{condition.value}", variables)


_default_engine = EligibilityEngine()


def evaluate_subject_against_schema(subject: Mapping[str, Any],
                                    schema: Union[BenefitSchema, Mapping[str, Any]],
                                    locale: str = "en", strict: bool = False) -> Verdict:
    """Evaluate one subject against one schema (parsed or as a document)."""
    if not isinstance(schema, BenefitSchema):
        schema = BenefitSchema.from_document(schema, locale)
    return _default_engine.evaluate(subject, schema, locale, strict)
