"""
Eligibility Service application package.

Decides whether user profiles satisfy the eligibility criteria of benefit
schemas. It provides:

- app.main: API surface for eligibility checks and health.
- app.rules: Criterion model, condition evaluator, engine and batch runners.
- app.schema: Structural validation of benefit-schema documents.
- app.i18n: Locale catalogs for reason and error messages.

Guidelines:
- The service is stateless; every input is supplied per request.
- Keep evaluation deterministic; log and measure at the API boundary.
"""
