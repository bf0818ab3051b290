import json
import logging
from typing import Any, List, Type, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schemas.base import ErrorResponse
from storage.base import StorageError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_LOCATIONS = ("body", "query", "path", "header", "cookie")


def _field_from_loc(loc) -> str | None:
    parts = list(loc)
    if parts and parts[0] in _LOCATIONS:
        parts = parts[1:]
    parts = [str(p) for p in parts]
    return ".".join(parts) or None


def field_errors(errors: List[dict]) -> List[dict]:
    """Converts pydantic error dicts into [{field, message}]."""
    return [{"field": _field_from_loc(err.get("loc", ())), "message": err.get("msg", "Invalid value")} for err in errors]


def validation_failed(errors: List[dict]) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=errors)


def parse_json_form(raw: str, field: str) -> dict:
    """Parses a multipart form field carrying a JSON object."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise validation_failed([{"field": field, "message": f"Invalid JSON format for {field}"}])
    if not isinstance(data, dict):
        raise validation_failed([{"field": field, "message": f"{field} must be a JSON object"}])
    return data


def validate_schema(schema: Type[ModelT], data: Any) -> ModelT:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise validation_failed(field_errors(e.errors()))


def _envelope(message: str, errors: Any = None) -> dict:
    return ErrorResponse(message=message, errors=errors).model_dump()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, list):
        content = _envelope("Validation failed", exc.detail)
    else:
        content = _envelope(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope("Validation failed", field_errors(exc.errors())),
    )


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Image host error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("Image storage is unavailable"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Internal server error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
