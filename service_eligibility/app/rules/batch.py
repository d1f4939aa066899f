"""
Batch eligibility checks.

Two modes are built on the single-pair engine:

- one subject against many benefit schemas (``check_eligibility``), and
- many subjects against one benefit schema (``check_users_eligibility``).

Each (subject, schema) pair is independent. A pair that fails with a
structural error is recorded in the ``errors`` bucket and the batch carries
on with the remaining entries. The ``a``-prefixed coroutines evaluate
entries concurrently in worker threads, bounded by ``concurrency``.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shared.logging import get_logger

from ..i18n import resolve_locale, translate
from ..schema import BenefitSchemaValidator
from .engine import EligibilityEngine
from .errors import ConditionError, InvalidSchemaError
from .models import BenefitSchema, EvaluationOptions, Reason

Outcome = Tuple[str, Dict[str, Any]]

SCHEMA_BUCKETS = ("eligible", "ineligible", "errors")
USER_BUCKETS = ("eligibleUsers", "ineligibleUsers", "errors")


def format_reason(reason: Reason) -> str:
    """Flatten a reason into ``"{category}: {message} ({description})"``."""
    return f"{reason.category.value}: {reason.message} ({reason.description})"


def schema_identifier(document: Any, index: int) -> Any:
    if isinstance(document, Mapping) and document.get("id") is not None:
        return document["id"]
    return f"schema-{index}"


def subject_identifier(subject: Any, index: int) -> Any:
    if isinstance(subject, Mapping):
        for key in ("id", "userId"):
            if subject.get(key) is not None:
                return subject[key]
    return f"subject-{index}"


def _collect(outcomes: Iterable[Outcome], buckets: Sequence[str]) -> Dict[str, List[Dict[str, Any]]]:
    results: Dict[str, List[Dict[str, Any]]] = {bucket: [] for bucket in buckets}
    for bucket, entry in outcomes:
        results[bucket].append(entry)
    return results


class BatchEvaluator:
    """Runs the eligibility engine over batches of schemas or subjects."""

    def __init__(self, engine: Optional[EligibilityEngine] = None,
                 validator: Optional[BenefitSchemaValidator] = None,
                 concurrency: int = 8, default_locale: str = "en"):
        self.engine = engine or EligibilityEngine()
        self.validator = validator or BenefitSchemaValidator()
        self.concurrency = max(1, concurrency)
        self.default_locale = default_locale
        self.logger = get_logger("eligibility.batch")

    def parse_options(self, options: Optional[Mapping[str, Any]] = None) -> EvaluationOptions:
        parsed = EvaluationOptions.from_mapping(options, self.default_locale)
        return EvaluationOptions(
            strict_checking=parsed.strict_checking,
            locale=resolve_locale(parsed.locale),
        )

    # One subject, many schemas

    def check_eligibility(self, subject: Mapping[str, Any], schemas: Sequence[Any],
                          options: Optional[Mapping[str, Any]] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Check one subject against every schema in ``schemas``."""
        opts = self.parse_options(options)
        outcomes = [
            self._evaluate_schema_entry(subject, document, index, opts)
            for index, document in enumerate(schemas)
        ]
        return _collect(outcomes, SCHEMA_BUCKETS)

    async def acheck_eligibility(self, subject: Mapping[str, Any], schemas: Sequence[Any],
                                 options: Optional[Mapping[str, Any]] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Concurrent variant of :meth:`check_eligibility`."""
        opts = self.parse_options(options)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(index: int, document: Any) -> Outcome:
            async with semaphore:
                return await asyncio.to_thread(self._evaluate_schema_entry, subject, document, index, opts)

        outcomes = await asyncio.gather(*(run(i, d) for i, d in enumerate(schemas)))
        return _collect(outcomes, SCHEMA_BUCKETS)

    def _evaluate_schema_entry(self, subject: Mapping[str, Any], document: Any,
                               index: int, opts: EvaluationOptions) -> Outcome:
        schema_id = schema_identifier(document, index)

        validation = self.validator.validate(document)
        if not validation.is_valid:
            self.logger.warning(
                "Benefit schema failed structural validation",
                schema_id=schema_id,
                error_count=len(validation.errors)
            )
            return "errors", {
                "schemaId": schema_id,
                "code": "InvalidSchemaStructure",
                "error": translate(opts.locale, "errors.invalidSchemaStructure"),
                "details": validation.errors,
            }

        try:
            schema = BenefitSchema.from_document(document, opts.locale, default_id=schema_id)
            verdict = self.engine.evaluate(subject, schema, opts.locale, opts.strict_checking)
        except (ConditionError, InvalidSchemaError) as e:
            self.logger.warning("Schema evaluation failed", schema_id=schema_id, code=e.code, error=e.message)
            return "errors", {"schemaId": schema_id, "code": e.code, "error": e.message}

        entry: Dict[str, Any] = {
            "schemaId": schema_id,
            "schemeDetails": verdict.scheme_details.to_dict(),
        }
        if verdict.is_eligible:
            return "eligible", entry

        entry["reasons"] = [reason.to_dict() for reason in verdict.reasons]
        return "ineligible", entry

    # Many subjects, one schema

    def prepare_schema(self, document: Any, opts: EvaluationOptions) -> BenefitSchema:
        """Validate and parse a schema document, raising InvalidSchemaError."""
        validation = self.validator.validate(document)
        if not validation.is_valid:
            raise InvalidSchemaError(opts.locale, validation.errors)
        return BenefitSchema.from_document(
            document, opts.locale, default_id=schema_identifier(document, 0)
        )

    def check_users_eligibility(self, subjects: Sequence[Mapping[str, Any]], document: Any,
                                options: Optional[Mapping[str, Any]] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Check every subject in ``subjects`` against one schema.

        Raises:
            InvalidSchemaError: the schema document is structurally invalid.
        """
        opts = self.parse_options(options)
        schema = self.prepare_schema(document, opts)
        outcomes = [
            self._evaluate_subject_entry(subject, index, schema, opts)
            for index, subject in enumerate(subjects)
        ]
        return _collect(outcomes, USER_BUCKETS)

    async def acheck_users_eligibility(self, subjects: Sequence[Mapping[str, Any]], document: Any,
                                       options: Optional[Mapping[str, Any]] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Concurrent variant of :meth:`check_users_eligibility`."""
        opts = self.parse_options(options)
        schema = self.prepare_schema(document, opts)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(index: int, subject: Mapping[str, Any]) -> Outcome:
            async with semaphore:
                return await asyncio.to_thread(self._evaluate_subject_entry, subject, index, schema, opts)

        outcomes = await asyncio.gather(*(run(i, s) for i, s in enumerate(subjects)))
        return _collect(outcomes, USER_BUCKETS)

    def _evaluate_subject_entry(self, subject: Mapping[str, Any], index: int,
                                schema: BenefitSchema, opts: EvaluationOptions) -> Outcome:
        try:
            verdict = self.engine.evaluate(subject, schema, opts.locale, opts.strict_checking)
        except ConditionError as e:
            user_id = subject_identifier(subject, index)
            self.logger.warning("Subject evaluation failed", user_id=user_id, code=e.code, error=e.message)
            return "errors", {"userId": user_id, "code": e.code, "error": e.message}

        if verdict.is_eligible:
            return "eligibleUsers", {**subject, "eligibleSchemes": [verdict.scheme_details.to_dict()]}

        return "ineligibleUsers", {**subject, "reasons": [format_reason(r) for r in verdict.reasons]}
