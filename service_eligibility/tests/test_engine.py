"""
Unit tests for the eligibility engine.
"""

import pytest

from service_eligibility.app.rules.documents import DocumentVerifier, iter_documents
from service_eligibility.app.rules.engine import (
    EligibilityEngine,
    evaluate_subject_against_schema,
    render_value,
)
from service_eligibility.app.rules.errors import (
    BetweenRequiresArrayError,
    InvalidSchemaError,
    UnsupportedConditionError,
)
from service_eligibility.app.rules.models import (
    BenefitSchema,
    ConditionOperator,
    CriterionCategory,
    ReasonCode,
)
from shared.test_helpers import TestDataFactory, create_benefit_schema, create_criterion


class TestEligibilityEngine:
    """Test cases for EligibilityEngine."""

    @pytest.fixture
    def engine(self):
        """Create engine instance."""
        return EligibilityEngine()

    @pytest.fixture
    def scholarship(self):
        """Parsed scholarship schema."""
        return BenefitSchema.from_document(TestDataFactory.create_test_scholarship())

    @pytest.fixture
    def profiles(self):
        return TestDataFactory.create_test_profiles()

    def test_eligible_subject(self, engine, scholarship, profiles):
        """Test a subject meeting every criterion."""
        verdict = engine.evaluate(profiles[0], scholarship)

        assert verdict.is_eligible is True
        assert verdict.reasons == ()
        assert verdict.scheme_details.id == "pre-matric-scholarship"
        assert verdict.scheme_details.title == "Pre-Matric Scholarship"

    def test_every_criterion_is_evaluated(self, engine, scholarship, profiles):
        """Test failures do not short-circuit the remaining criteria."""
        verdict = engine.evaluate(profiles[1], scholarship)

        assert verdict.is_eligible is False
        assert [r.field for r in verdict.reasons] == ["age", "caste", "annualIncome", "marks", "state"]
        assert [r.code for r in verdict.reasons] == [
            ReasonCode.CRITERION_NOT_MET,
            ReasonCode.DOCUMENT_INVALID,
            ReasonCode.CRITERION_NOT_MET,
            ReasonCode.CRITERION_NOT_MET,
            ReasonCode.CRITERION_NOT_MET,
        ]

    def test_reason_message(self, engine, scholarship, profiles):
        """Test the rendered failure message."""
        verdict = engine.evaluate(profiles[1], scholarship)
        age_reason = verdict.reasons[0]

        assert age_reason.category is CriterionCategory.PERSONAL
        assert age_reason.message == "Does not meet personal criteria (Required: >= 18, Got: 16)"
        assert age_reason.description == "Applicant must be an adult"
        assert age_reason.observed_value == 16
        assert age_reason.required_value == "18"
        assert age_reason.operator is ConditionOperator.GTE

    def test_between_reason_message(self, engine, scholarship, profiles):
        verdict = engine.evaluate(profiles[1], scholarship)
        marks_reason = verdict.reasons[3]

        assert marks_reason.message == (
            "Does not meet educational criteria (Required: between 60 and 100, Got: 58)"
        )

    def test_reason_message_localized(self, engine, scholarship, profiles):
        verdict = engine.evaluate(profiles[1], scholarship, locale="hi")

        assert verdict.reasons[0].message == "personal मानदंड पूरा नहीं होता (आवश्यक: >= 18, प्राप्त: 16)"

    def test_missing_field_continues_evaluation(self, engine):
        """Test a missing field is reported and later criteria still run."""
        schema = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("income", "lte", 100000, category="economical", description="Low income"),
            create_criterion("age", "gte", 18),
        ]))

        verdict = engine.evaluate({"age": 12}, schema)

        assert verdict.is_eligible is False
        assert len(verdict.reasons) == 2
        missing, age = verdict.reasons
        assert missing.code is ReasonCode.MISSING_FIELD
        assert missing.message == "Missing required field: income"
        assert missing.category is CriterionCategory.ECONOMICAL
        assert age.code is ReasonCode.CRITERION_NOT_MET

    def test_null_value_is_present_unless_strict(self, engine):
        """Test strict checking treats a null value as missing."""
        schema = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("nickname", "equals", "abc"),
        ]))
        subject = {"nickname": None}

        lenient = engine.evaluate(subject, schema)
        strict = engine.evaluate(subject, schema, strict=True)

        assert lenient.reasons[0].code is ReasonCode.CRITERION_NOT_MET
        assert strict.reasons[0].code is ReasonCode.MISSING_FIELD

    def test_document_invalid(self, engine):
        """Test document-gated criteria require a verified allowed proof."""
        schema = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("disability", "equals", "true", description="Disabled applicant",
                             allowed_proofs=["disabilityCertificate"]),
        ]))

        unverified = engine.evaluate({"disability": True, "documents": [
            {"type": "disabilityCertificate", "verified": False},
        ]}, schema)
        wrong_type = engine.evaluate({"disability": True, "documents": [
            {"type": "aadhaar", "verified": True},
        ]}, schema)
        verified = engine.evaluate({"disability": True, "documents": [
            {"documentType": "disabilityCertificate", "verified": True},
        ]}, schema)

        reason = unverified.reasons[0]
        assert reason.code is ReasonCode.DOCUMENT_INVALID
        assert reason.message == "Missing or invalid document for: Disabled applicant"
        assert reason.required_documents == ("disabilityCertificate",)
        assert wrong_type.reasons[0].code is ReasonCode.DOCUMENT_INVALID
        assert verified.is_eligible is True

    def test_evaluation_is_idempotent(self, engine, scholarship, profiles):
        """Test repeated evaluation yields the same verdict without mutating input."""
        subject = profiles[1]
        snapshot = dict(subject)

        first = engine.evaluate(subject, scholarship)
        second = engine.evaluate(subject, scholarship)

        assert first == second
        assert subject == snapshot

    def test_condition_errors_propagate(self, engine):
        """Test structural errors are raised, not reported as ineligibility."""
        unknown = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("name", "startswith", "a"),
        ]))
        bad_between = BenefitSchema.from_document(create_benefit_schema("s2", [
            create_criterion("age", "between", [18]),
        ]))

        with pytest.raises(UnsupportedConditionError):
            engine.evaluate({"name": "asha"}, unknown)
        with pytest.raises(BetweenRequiresArrayError):
            engine.evaluate({"age": 20}, bad_between)

    def test_missing_field_precedes_condition_errors(self, engine):
        """Test a missing field is reported before the operator is resolved."""
        schema = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("name", "startswith", "a"),
        ]))

        verdict = engine.evaluate({}, schema)

        assert verdict.reasons[0].code is ReasonCode.MISSING_FIELD

    def test_custom_document_verifier(self):
        """Test the verification oracle can be replaced."""
        class TrustingVerifier(DocumentVerifier):
            def is_verified(self, document):
                return True

        engine = EligibilityEngine(document_verifier=TrustingVerifier())
        schema = BenefitSchema.from_document(create_benefit_schema("s1", [
            create_criterion("caste", "in", ["sc"], allowed_proofs=["casteCertificate"]),
        ]))

        verdict = engine.evaluate({"caste": "SC", "documents": {"casteCertificate": {}}}, schema)

        assert verdict.is_eligible is True


class TestVerdictSerialization:
    """Test cases for verdict and reason wire format."""

    def test_verdict_to_dict(self):
        document = TestDataFactory.create_test_scholarship()
        subject = TestDataFactory.create_test_profiles()[1]

        data = evaluate_subject_against_schema(subject, document).to_dict()

        assert data["isEligible"] is False
        assert data["schemeDetails"] == {
            "id": "pre-matric-scholarship",
            "title": "Pre-Matric Scholarship",
            "category": "education",
        }
        age, caste = data["reasons"][:2]
        assert age == {
            "code": "CriterionNotMet",
            "category": "personal",
            "field": "age",
            "message": "Does not meet personal criteria (Required: >= 18, Got: 16)",
            "description": "Applicant must be an adult",
            "observedValue": 16,
            "requiredValue": "18",
            "operator": "gte",
        }
        assert caste["code"] == "DocumentInvalid"
        assert caste["requiredDocuments"] == ["casteCertificate"]
        assert "observedValue" not in caste

    def test_flat_document(self):
        """Test documents without a locale wrapper are accepted."""
        document = create_benefit_schema("flat", [create_criterion("age", "gte", 18)], localized=False)

        verdict = evaluate_subject_against_schema({"age": 30}, document)

        assert verdict.is_eligible is True
        assert verdict.scheme_details.to_dict() == {"id": "flat"}

    def test_criteria_always_read_from_en_block(self):
        """Test the locale changes message language, never the criteria."""
        document = create_benefit_schema("s1", [create_criterion("age", "gte", 18)])
        document["hi"] = {"eligibility": [create_criterion("age", "gte", 21)]}

        english = evaluate_subject_against_schema({"age": 19}, document, locale="en")
        hindi = evaluate_subject_against_schema({"age": 19}, document, locale="hi")

        assert english.is_eligible is True
        assert hindi.is_eligible is True

    def test_empty_criteria_is_eligible(self):
        verdict = evaluate_subject_against_schema({}, create_benefit_schema("s1", []))

        assert verdict.is_eligible is True

    def test_unparseable_document(self):
        with pytest.raises(InvalidSchemaError):
            evaluate_subject_against_schema({}, {"en": {"basicDetails": {}}})
        with pytest.raises(InvalidSchemaError):
            evaluate_subject_against_schema({}, create_benefit_schema("s1", [
                {"type": "spiritual", "description": "x", "criteria": {"name": "a", "condition": "gte",
                                                                       "conditionValues": 1}},
            ]))

    @pytest.mark.parametrize("value, expected", [
        (["sc", "st"], "sc, st"),
        (True, "true"),
        (18.0, "18"),
        (2.5, "2.5"),
        (None, "null"),
        ("abc", "abc"),
    ])
    def test_render_value(self, value, expected):
        assert render_value(value) == expected


class TestDocuments:
    """Test cases for document lookup."""

    def test_iter_documents_mapping(self):
        subject = {"documents": {"aadhaar": {"verified": True}, "broken": "x"}}

        assert list(iter_documents(subject)) == [("aadhaar", {"verified": True})]

    def test_iter_documents_list(self):
        subject = {"documents": [{"type": "aadhaar"}, {"documentType": "pan"}, {"verified": True}]}

        assert [t for t, _ in iter_documents(subject)] == ["aadhaar", "pan"]

    def test_verified_flag_must_be_true(self):
        verifier = DocumentVerifier()

        assert verifier.is_verified({"verified": True}) is True
        assert verifier.is_verified({"verified": "true"}) is False
        assert verifier.is_verified({}) is False

    def test_no_allowed_types_always_valid(self):
        assert DocumentVerifier().has_valid_document({}, []) is True
