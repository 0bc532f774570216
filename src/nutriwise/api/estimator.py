"""Estimator endpoint accepting `{action, payload}` requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from openai import APIStatusError, InternalServerError, RateLimitError

from nutriwise.services.nutritionist import ConfigurationError, InvalidRequestError

if TYPE_CHECKING:
    from nutriwise.containers import AppContainer

router = APIRouter(prefix="/api", tags=["estimator"])

_logger = logging.getLogger(__name__)


@router.post("/estimator")
async def estimator(request: Request) -> JSONResponse:
    """Run one estimator action."""
    container: AppContainer = request.app.state.container
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return _error(status.HTTP_400_BAD_REQUEST, "Missing request body")

    try:
        result = await container.nutritionist_service.handle(
            body.get("action"), body.get("payload")
        )
    except InvalidRequestError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    except ConfigurationError as exc:
        _logger.error("%s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except APIStatusError as exc:
        busy_status = _busy_status(exc)
        if busy_status is None:
            _logger.exception("Estimator action failed")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        _logger.warning("LLM is busy (status %s): %s", exc.status_code, exc)
        return _error(busy_status, str(exc) or "Server is busy")
    except Exception as exc:
        _logger.exception("Estimator action failed")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal Server Error"
        )
    return JSONResponse(result)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _busy_status(exc: APIStatusError) -> int | None:
    """Map LLM rate limiting and overload to the statuses clients retry on."""
    if isinstance(exc, RateLimitError) or exc.status_code == 429:
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, InternalServerError) or exc.status_code == 503:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return None
