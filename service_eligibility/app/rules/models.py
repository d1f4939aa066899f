"""
Eligibility data models.

Benefit-schema documents arrive in the wire format used by the HTTP API::

    {
        "id": "scheme-1",
        "en": {
            "basicDetails": {"title": "...", "category": "..."},
            "eligibility": [
                {
                    "type": "personal",
                    "description": "Applicant must be an adult",
                    "criteria": {"name": "age", "condition": "gte", "conditionValues": 18},
                    "allowedProofs": ["aadhaar"]
                }
            ]
        }
    }

and are parsed once into the immutable dataclasses below.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidSchemaError


class CriterionCategory(str, Enum):
    """Criterion categories."""
    PERSONAL = "personal"
    EDUCATIONAL = "educational"
    ECONOMICAL = "economical"
    GEOGRAPHICAL = "geographical"


class ConditionOperator(str, Enum):
    """Canonical comparison operators."""
    EQUALS = "equals"
    IN = "in"
    GTE = "gte"
    LTE = "lte"
    GT = "gt"
    LT = "lt"
    BETWEEN = "between"


class ComparisonType(str, Enum):
    """Type both sides of a comparison are coerced to."""
    NUMBER = "number"
    BOOLEAN = "boolean"
    TEXT = "text"


class ReasonCode(str, Enum):
    """Why a criterion failed."""
    MISSING_FIELD = "MissingField"
    DOCUMENT_INVALID = "DocumentInvalid"
    CRITERION_NOT_MET = "CriterionNotMet"


@dataclass(frozen=True)
class PlainOperator:
    """Operator given as a bare string, e.g. ``"gte"``."""
    text: str


@dataclass(frozen=True)
class WrappedOperator:
    """Operator given as ``{"condition": "gte"}``."""
    condition: str


@dataclass(frozen=True)
class NestedWrappedOperator:
    """Operator given as ``{"criteria": {"condition": "gte"}}``."""
    condition: str


OperatorSpec = Union[PlainOperator, WrappedOperator, NestedWrappedOperator]


@dataclass(frozen=True)
class Criterion:
    """One comparison rule of a benefit schema."""
    category: CriterionCategory
    description: str
    field: str
    condition: Any
    operands: Any
    required_proof_types: Tuple[str, ...] = ()

    @classmethod
    def from_document(cls, entry: Any, locale: Optional[str] = None) -> "Criterion":
        """Build a criterion from one ``eligibility`` entry."""
        if not isinstance(entry, Mapping):
            raise InvalidSchemaError(locale, [{"message": "eligibility entry must be an object"}])

        rule = entry.get("criteria")
        if not isinstance(rule, Mapping) or not isinstance(rule.get("name"), str):
            raise InvalidSchemaError(locale, [{"message": "criteria.name is required"}])

        try:
            category = CriterionCategory(entry.get("type"))
        except ValueError:
            raise InvalidSchemaError(
                locale, [{"message": f"unknown criterion type: {entry.get('type')!r}"}]
            ) from None

        proofs = entry.get("allowedProofs") or ()
        return cls(
            category=category,
            description=str(entry.get("description", "")),
            field=rule["name"],
            condition=rule.get("condition"),
            operands=rule.get("conditionValues"),
            required_proof_types=tuple(proofs),
        )


@dataclass(frozen=True)
class SchemeDetails:
    """Identifying information of a benefit schema."""
    id: Optional[str]
    title: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_document(cls, schema_id: Optional[str], content: Mapping[str, Any]) -> "SchemeDetails":
        basic = content.get("basicDetails")
        if not isinstance(basic, Mapping):
            basic = {}
        return cls(
            id=schema_id,
            title=basic.get("title"),
            category=basic.get("category"),
            sub_category=basic.get("subCategory"),
            tags=tuple(basic.get("tags") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.title is not None:
            data["title"] = self.title
        if self.category is not None:
            data["category"] = self.category
        if self.sub_category is not None:
            data["subCategory"] = self.sub_category
        if self.tags:
            data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class BenefitSchema:
    """Eligibility view of a benefit schema: its ordered criteria."""
    schema_id: Optional[str]
    criteria: Tuple[Criterion, ...]
    details: SchemeDetails

    @classmethod
    def from_document(cls, document: Any, locale: Optional[str] = None,
                      default_id: Optional[str] = None) -> "BenefitSchema":
        """Parse a benefit-schema document.

        Criteria are always read from the ``en`` content block, or from the
        document itself when it has none. ``locale`` only selects the
        language of error messages.
        """
        if not isinstance(document, Mapping):
            raise InvalidSchemaError(locale, [{"message": "benefit schema must be an object"}])

        content: Any = document.get("en")
        if not isinstance(content, Mapping):
            content = document

        eligibility = content.get("eligibility")
        if not isinstance(eligibility, list):
            raise InvalidSchemaError(locale, [{"message": "eligibility must be an array"}])

        schema_id = document.get("id", default_id)
        return cls(
            schema_id=schema_id,
            criteria=tuple(Criterion.from_document(entry, locale) for entry in eligibility),
            details=SchemeDetails.from_document(schema_id, content),
        )


@dataclass(frozen=True)
class Reason:
    """Structured explanation of one failed criterion."""
    code: ReasonCode
    category: CriterionCategory
    field: str
    message: str
    description: str
    observed_value: Any = None
    required_value: Any = None
    operator: Optional[ConditionOperator] = None
    required_documents: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "code": self.code.value,
            "category": self.category.value,
            "field": self.field,
            "message": self.message,
            "description": self.description,
        }
        if self.code is ReasonCode.CRITERION_NOT_MET:
            data["observedValue"] = self.observed_value
            data["requiredValue"] = self.required_value
            data["operator"] = self.operator.value if self.operator else None
        if self.required_documents:
            data["requiredDocuments"] = list(self.required_documents)
        return data


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating one subject against one schema."""
    is_eligible: bool
    reasons: Tuple[Reason, ...] = ()
    scheme_details: Optional[SchemeDetails] = None

    @classmethod
    def from_reasons(cls, reasons: List[Reason], scheme_details: SchemeDetails) -> "Verdict":
        return cls(
            is_eligible=not reasons,
            reasons=tuple(reasons),
            scheme_details=scheme_details,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isEligible": self.is_eligible,
            "reasons": [reason.to_dict() for reason in self.reasons],
            "schemeDetails": self.scheme_details.to_dict() if self.scheme_details else None,
        }


@dataclass(frozen=True)
class EvaluationOptions:
    """Per-call evaluation options."""
    strict_checking: bool = False
    locale: str = "en"

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None,
                     default_locale: str = "en") -> "EvaluationOptions":
        options = options or {}
        return cls(
            strict_checking=bool(options.get("strictChecking", False)),
            locale=options.get("locale") or default_locale,
        )


class CheckEligibilityRequest(BaseModel):
    """Request body for checking one profile against many benefit schemas."""
    model_config = ConfigDict(populate_by_name=True)

    user_profile: Dict[str, Any] = Field(..., alias="userProfile", description="Profile to evaluate")
    benefits_list: List[Any] = Field(..., alias="benefitsList", description="Benefit schema documents")


class CheckUsersEligibilityRequest(BaseModel):
    """Request body for checking many profiles against one benefit schema."""
    model_config = ConfigDict(populate_by_name=True)

    user_profiles: List[Dict[str, Any]] = Field(..., alias="userProfiles", description="Profiles to evaluate")
    benefit_schema: Dict[str, Any] = Field(..., alias="benefitSchema", description="Benefit schema document")


class CheckEligibilityResponse(BaseModel):
    """Partitioned result of a profile checked against many schemas."""
    eligible: List[Dict[str, Any]] = Field(default_factory=list)
    ineligible: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class CheckUsersEligibilityResponse(BaseModel):
    """Partitioned result of many profiles checked against one schema."""
    model_config = ConfigDict(populate_by_name=True)

    eligible_users: List[Dict[str, Any]] = Field(default_factory=list, alias="eligibleUsers")
    ineligible_users: List[Dict[str, Any]] = Field(default_factory=list, alias="ineligibleUsers")
    errors: List[Dict[str, Any]] = Field(default_factory=list)
