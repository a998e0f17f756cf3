"""Error responses: bare 400 bodies and the field-keyed validation problem."""
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.app.logging import get_logger
from src.client.schemas import ValidationProblemResponse
from src.shared.exceptions import EntityValidationError

VALIDATION_STATUS = 422

logger = get_logger(__name__)


def bad_request(content: Any) -> JSONResponse:
    """400 whose body is the bare message string or error list."""
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


def validation_problem(errors: dict[str, list[str]]) -> JSONResponse:
    body = ValidationProblemResponse(status=VALIDATION_STATUS, errors=errors)
    return JSONResponse(status_code=VALIDATION_STATUS, content=body.model_dump())


def request_errors_by_field(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group FastAPI's request errors by the last element of their location."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())]
        field = location[-1] if location else "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


async def entity_validation_handler(request: Request, exc: EntityValidationError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return validation_problem(exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = request_errors_by_field(exc)
    logger.warning(f"{request.method} {request.url.path} rejected: malformed request for {sorted(errors)}")
    return validation_problem(errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EntityValidationError, entity_validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
