"""Domain exceptions and the FastAPI handlers that render them.

Every handler answers with the same JSON envelope::

    {"error": "<code>", "detail": <str | list>}
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("donation_app.errors")


class DonationError(Exception):
    """Base class for donor-correctable misuse of the donation engine."""

    code = "donation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class UnknownCategoryError(DonationError):
    code = "unknown_category"


class DuplicateCategoryError(DonationError):
    code = "duplicate_category"


class CategoryNotAllowedError(DonationError):
    code = "category_not_allowed"


class LastItemError(DonationError):
    code = "last_item"


class SubmissionInFlightError(DonationError):
    code = "submission_in_flight"
    status_code = status.HTTP_409_CONFLICT


class SubmissionBlockedError(DonationError):
    code = "submission_blocked"
    status_code = 422

    def __init__(self, reasons: List[str]):
        super().__init__("; ".join(reasons))
        self.reasons = list(reasons)


class CollaboratorError(Exception):
    """An external collaborator (reference data source, order sink) failed."""

    code = "collaborator_failure"

    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class OrderRejectedError(CollaboratorError):
    code = "order_rejected"


def not_found_handler(request: Request, exc):  # type: ignore
    if getattr(exc, "status_code", 404) != 404:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = f"No route for {request.method} {request.url.path}"
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": detail},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "detail": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may embed the raw exception in ctx, which is not JSON serializable
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


def donation_error_handler(request: Request, exc: DonationError):  # type: ignore
    if isinstance(exc, SubmissionBlockedError):
        detail: object = exc.reasons
    else:
        detail = str(exc)
    logger.info("donation error %s: %s", exc.code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": detail},
    )


def collaborator_error_handler(request: Request, exc: CollaboratorError):  # type: ignore
    logger.warning("collaborator failure (%s): %s", exc.source or "unknown", exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": exc.code,
            "detail": "The request could not be completed. Please try again.",
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
