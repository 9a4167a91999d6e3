import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from whatsapp_dispatch.core.config import settings

logger = logging.getLogger(__name__)


class RegistryConfigurationError(Exception):
    """Static template/event tables are inconsistent. Raised at import time."""


class ArgumentInvariantViolation(RuntimeError):
    """Built argument list does not match the template's declared count."""


class DispatchError(Exception):
    """Base class for errors rendered as a structured JSON envelope."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_content(self) -> Dict[str, Any]:
        content = {"success": False, "error": self.message}
        content.update({k: v for k, v in self.details.items() if v is not None})
        return content


# --- Validation errors (caller's fault, 400) ---


class DispatchValidationError(DispatchError):
    status_code = status.HTTP_400_BAD_REQUEST


class MissingTemplateId(DispatchValidationError):
    def __init__(self, available: Sequence[str]):
        super().__init__(
            "Missing required field: templateId", availableTemplates=list(available)
        )


class UnknownTemplate(DispatchValidationError):
    def __init__(self, template_id: str, available: Sequence[str]):
        super().__init__(
            f"Unknown template ID: {template_id}", availableTemplates=list(available)
        )


class MissingPhone(DispatchValidationError):
    def __init__(self, message: str = "Missing required field: phone"):
        super().__init__(message)


class InvalidPhone(DispatchValidationError):
    def __init__(self):
        super().__init__("Invalid phone number format (minimum 10 digits)")


class InvalidArgsType(DispatchValidationError):
    def __init__(self):
        super().__init__("Missing or invalid field: templateArgs (must be an array)")


class ArgCountMismatch(DispatchValidationError):
    def __init__(
        self,
        template_id: str,
        expected: int,
        received: int,
        arg_descriptions: Sequence[str],
        sample_args: Sequence[str],
    ):
        super().__init__(
            f"Template {template_id} requires {expected} arguments, got {received}",
            expectedArgs=list(arg_descriptions),
            sampleArgs=list(sample_args),
        )


class MissingEventKey(DispatchValidationError):
    def __init__(self):
        super().__init__("Missing required field: eventKey")


class InvalidEventKey(DispatchValidationError):
    def __init__(self, event_key: Any, valid_events: Sequence[str]):
        super().__init__(
            f"Invalid eventKey: '{event_key}'", validEvents=list(valid_events)
        )


class InvalidPayload(DispatchValidationError):
    def __init__(self):
        super().__init__("Missing or invalid field: payload (must be an object)")


class MissingRequiredArgument(DispatchValidationError):
    """One or more template slots could not be filled from the event payload."""

    def __init__(self, template_id: str, missing: List[Dict[str, str]], payload_keys: List[str]):
        fields = ", ".join(f"'{m['path']}' for {m['slot']}" for m in missing)
        super().__init__(
            f"Missing required payload fields for template {template_id}: {fields}",
            missing=missing,
            receivedPayloadKeys=payload_keys,
        )
        self.missing = missing


class InvalidArgumentValue(DispatchValidationError):
    def __init__(self, slot: str, path: str, value: Any, expected: str):
        super().__init__(
            f"Payload field '{path}' for {slot} must be {expected}, got {value!r}"
        )


# --- Configuration errors (operator's fault) ---


class UnknownTemplateForEvent(DispatchError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, event_key: str, template_id: str):
        super().__init__(
            f"Event '{event_key}' is mapped to unregistered template '{template_id}'",
            errorType="configuration",
            eventKey=event_key,
            templateId=template_id,
        )


def register_exception_handlers(app):
    """Register all exception handlers."""

    @app.exception_handler(DispatchError)
    async def dispatch_exception_handler(request: Request, exc: DispatchError):
        """Render validation and configuration errors as structured envelopes."""
        if exc.status_code >= 500:
            logger.error(f"Configuration error on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"Rejected request on {request.url.path}: {exc.message}")

        content = exc.to_content()
        content["timestamp"] = datetime.utcnow().isoformat()
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(ValidationError)
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc):
        """Handle validation errors."""
        logger.warning(f"Validation error on {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "error": "Validation error",
                "errors": exc.errors() if hasattr(exc, "errors") else str(exc),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all uncaught exceptions."""
        if isinstance(exc, ArgumentInvariantViolation):
            logger.critical(f"Internal invariant violated on {request.url.path}: {exc}")
        else:
            logger.error(
                f"Unhandled exception on {request.url.path}: {exc}", exc_info=True
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Internal server error",
                "details": str(exc) if settings.DEBUG else None,
                "path": str(request.url.path),
                "timestamp": datetime.utcnow().isoformat(),
            },
        )
