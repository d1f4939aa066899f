"""
Eligibility rules package.

Evaluates subjects (user profiles) against the criteria of benefit
schemas and explains every failed criterion.

Modules of interest:
- models: Criterion, BenefitSchema, Reason and Verdict data classes.
- conditions: Operator resolution, type coercion and comparison.
- engine: Per-(subject, schema) evaluation producing a Verdict.
- batch: One-subject/many-schemas and many-subjects/one-schema runners.
- documents: Verification of document-gated criteria.
- errors: Structural errors raised for malformed criteria.

Evaluation is deterministic and free of shared state, so batches can be
evaluated concurrently.
"""
