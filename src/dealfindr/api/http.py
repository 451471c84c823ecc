# src/dealfindr/api/http.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from dealfindr.adapters.config import config
from dealfindr.adapters.llm_client import make_text_generator
from dealfindr.adapters.logging_utils import get_logger
from dealfindr.domain.criteria import DEFAULT_CRITERIA
from dealfindr.domain.ports import TextGenerator
from dealfindr.services.assessment import assess_payload
from .schemas import AssessRequest, AssessResponse, ErrorResponse

logger = get_logger(__name__)


def create_app(generator: TextGenerator | None = None) -> FastAPI:
    """
    Build the API with an explicit text-generation handle.

    Pass a stub generator in tests; `app` below uses the configured provider.
    """
    app = FastAPI(title="DealFindrs Assessment API")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/criteria/default")
    def default_criteria() -> dict[str, Any]:
        return DEFAULT_CRITERIA.model_dump(by_alias=True)

    @app.get("/assess")
    def describe_assess() -> dict[str, Any]:
        return {
            "message": "DealFindrs Assessment API",
            "endpoints": {
                "POST": {
                    "description": "Assess an opportunity",
                    "body": {
                        "opportunity": "OpportunityInput object (required)",
                        "criteria": "AssessmentCriteria object (optional)",
                        "quick": "boolean - skip narrative insights (optional)",
                    },
                },
            },
        }

    @app.post(
        "/assess",
        response_model=AssessResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def assess_endpoint(body: AssessRequest) -> Any:
        try:
            result = assess_payload(
                body.opportunity,
                body.criteria,
                quick=body.quick,
                generator=generator,
            )
        except ValueError as e:
            # includes pydantic.ValidationError
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid assessment request", "message": str(e)},
            )
        except Exception as e:
            logger.exception("assessment_failed", extra={"context": {"error": str(e)}})
            return JSONResponse(
                status_code=500,
                content={"error": "Assessment failed", "message": str(e)},
            )

        return AssessResponse(success=True, result=result.to_dict())

    return app


app = create_app(make_text_generator(config))
