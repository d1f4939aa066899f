"""
Structural (JSON-schema) validation of benefit-schema documents.
"""

from .validator import BENEFIT_SCHEMA, BenefitSchemaValidator, ValidationResult

__all__ = ["BENEFIT_SCHEMA", "BenefitSchemaValidator", "ValidationResult"]
