"""
Eligibility service.
"""

from typing import Any, Dict, List, Optional, Sequence

from fastapi import Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.observability import get_observability_manager

from .i18n import translate
from .i18n.translator import load_catalog
from .rules.batch import SCHEMA_BUCKETS, USER_BUCKETS, BatchEvaluator
from .rules.models import (
    CheckEligibilityRequest,
    CheckEligibilityResponse,
    CheckUsersEligibilityRequest,
    CheckUsersEligibilityResponse,
)


class EligibilityService(BaseService):
    """Eligibility service implementation."""

    def __init__(self, port: Optional[int] = None):
        super().__init__("eligibility", port)

        self.observability = get_observability_manager("eligibility", metrics=self.metrics)
        self.batch = BatchEvaluator(
            concurrency=self.config.batch_concurrency,
            default_locale=self.config.default_locale,
        )

        self._setup_eligibility_routes()

    def get_locale(self, request: Request) -> str:
        """Negotiate the response locale.

        Query ``locale``/``lang`` wins, then the primary ``Accept-Language``
        tag, then the configured default.
        """
        supported = self.config.supported_locales

        query_locale = request.query_params.get("locale") or request.query_params.get("lang")
        if query_locale and query_locale in supported:
            return query_locale

        accept_language = request.headers.get("accept-language")
        if accept_language:
            lang = accept_language.split(",")[0].split(";")[0].split("-")[0].strip().lower()
            if lang in supported:
                return lang

        return self.config.default_locale

    def _setup_eligibility_routes(self):
        """Set up eligibility-specific routes."""

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            """Report malformed request bodies as 400 Bad Request."""
            locale = self.get_locale(request)
            self.observability.log_error(
                "BAD_REQUEST",
                translate(locale, "errors.schemaValidationFailed"),
                errors=len(exc.errors()),
                path=request.url.path
            )
            return JSONResponse(
                status_code=400,
                content={
                    "code": "BAD_REQUEST",
                    "message": translate(locale, "errors.badRequest"),
                    "details": {"errors": jsonable_encoder(exc.errors())},
                }
            )

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "eligibility",
                "message": "Eligibility Service",
                "version": "1.0.0",
                "capabilities": ["check_eligibility", "check_users_eligibility", "i18n"],
                "locales": list(self.config.supported_locales),
            }

        @self.app.post("/check-eligibility", response_model=CheckEligibilityResponse)
        async def check_eligibility(
            request: Request,
            body: CheckEligibilityRequest,
            strict_checking: bool = Query(False, alias="strictChecking", description="Enable strict eligibility checking"),
            locale: Optional[str] = Query(None, description="Language locale (en, hi)"),
        ):
            """Check one user profile against a list of benefit schemas."""
            locale = self.get_locale(request)
            self.observability.trace_request(locale=locale)
            options = {
                "strictChecking": strict_checking or self.config.strict_checking,
                "locale": locale,
            }

            with self.observability.measure_operation("eligibility_check_duration_seconds", mode="schemas"):
                result = await self.batch.acheck_eligibility(body.user_profile, body.benefits_list, options)

            self._record_batch("schemas", result, SCHEMA_BUCKETS)
            return result

        @self.app.post("/check-users-eligibility", response_model=CheckUsersEligibilityResponse)
        async def check_users_eligibility(
            request: Request,
            body: CheckUsersEligibilityRequest,
            strict_checking: bool = Query(False, alias="strictChecking", description="Enable strict eligibility checking"),
            locale: Optional[str] = Query(None, description="Language locale (en, hi)"),
        ):
            """Partition a list of user profiles by eligibility for one benefit schema."""
            locale = self.get_locale(request)
            self.observability.trace_request(locale=locale)
            options = {
                "strictChecking": strict_checking or self.config.strict_checking,
                "locale": locale,
            }

            with self.observability.measure_operation("eligibility_check_duration_seconds", mode="users"):
                result = await self.batch.acheck_users_eligibility(body.user_profiles, body.benefit_schema, options)

            self._record_batch("users", result, USER_BUCKETS)
            return result

    def _record_batch(self, mode: str, result: Dict[str, List[Dict[str, Any]]], buckets: Sequence[str]):
        """Record metrics and a business event for one batch."""
        eligible, ineligible, errors = (result[bucket] for bucket in buckets)
        self.metrics.record_batch(mode, {
            "eligible": len(eligible),
            "ineligible": len(ineligible),
            "error": len(errors),
        })
        for entry in errors:
            self.metrics.increment_counter("eligibility_batch_errors_total", code=entry.get("code", "unknown"))

        self.observability.log_business_event(
            "eligibility_checked",
            mode=mode,
            eligible=len(eligible),
            ineligible=len(ineligible),
            errors=len(errors),
        )

    def _internal_error_message(self, request: Request) -> str:
        return translate(self.get_locale(request), "errors.internalServerError")

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check that every supported locale has a message catalog."""
        return {
            f"locale:{locale}": "ok" if load_catalog(locale) else "missing"
            for locale in self.config.supported_locales
        }


def create_app():
    """Create eligibility service application."""
    service = EligibilityService()
    return service.app


if __name__ == "__main__":
    service = EligibilityService()
    service.run()
