"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from src.domain.exceptions import (
    DomainException,
    InvalidProposalStateException,
    ProposalNotFoundException,
    PublishException,
    ValidationException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle malformed request bodies and parameters."""
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return _error_response(400, "VALIDATION_ERROR", details or "Invalid request")

    @app.exception_handler(ValidationException)
    async def validation_handler(
        request: Request,
        exc: ValidationException,
    ) -> JSONResponse:
        """Handle invalid input rejected by the workflow."""
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(ProposalNotFoundException)
    async def proposal_not_found_handler(
        request: Request,
        exc: ProposalNotFoundException,
    ) -> JSONResponse:
        """Handle proposal not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(InvalidProposalStateException)
    async def invalid_state_handler(
        request: Request,
        exc: InvalidProposalStateException,
    ) -> JSONResponse:
        """Handle transitions that are illegal in the current state."""
        logger.info(
            "proposal_transition_refused",
            request_id=get_request_id(),
            proposal_id=exc.proposal_id,
            code=exc.code,
            message=exc.message,
        )
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(PublishException)
    async def publish_error_handler(
        request: Request,
        exc: PublishException,
    ) -> JSONResponse:
        """Handle event channel failures after the state change was saved."""
        logger.error(
            "event_publish_error",
            request_id=get_request_id(),
            topics=exc.topics,
            message=exc.message,
        )
        return _error_response(
            502,
            exc.code,
            "The change was saved but its event could not be published.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
