"""
Shared HTTP client utilities: configured AsyncClient and the single-call
request helper used by builders and the client facade.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import httpx

from nutrient_dws.core.config import settings
from nutrient_dws.core.constants import DEFAULT_MIME_TYPE
from nutrient_dws.core.error_handling import (
    APIError,
    AuthenticationError,
    NetworkError,
    NutrientError,
    ValidationError,
    log_api_call,
)
from nutrient_dws.models.file_inputs import NormalizedFileData
from nutrient_dws.models.workflow_models import ApiKey, NutrientClientOptions

logger = logging.getLogger(__name__)


class ResponseType(Enum):
    """How the response body is decoded."""
    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"

    def __str__(self) -> str:
        return self.value


@dataclass
class RequestConfig:
    """Description of one API request."""

    endpoint: str
    method: str = "POST"
    data: Optional[Dict[str, Any]] = None
    files: Optional[Mapping[str, NormalizedFileData]] = None
    headers: Optional[Dict[str, str]] = None
    timeout: Optional[float] = None


@dataclass
class ApiResponse:
    """Decoded response from the service."""

    data: Any
    status: int
    status_text: str
    headers: Dict[str, str]


def get_async_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """Create a configured AsyncClient with shared limits/timeouts."""
    return httpx.AsyncClient(
        timeout=timeout or settings.HTTP_CLIENT_TIMEOUT,
        limits=httpx.Limits(
            max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS,
            max_connections=settings.HTTP_MAX_CONNECTIONS,
        ),
    )


def build_url(base_url: Optional[str], endpoint: str) -> str:
    """Join base URL and endpoint without doubling slashes."""
    base = (base_url or settings.NUTRIENT_BASE_URL).rstrip("/")
    return f"{base}/{endpoint.lstrip('/')}"


async def resolve_api_key(api_key: ApiKey) -> str:
    """Resolve a literal key or an async key provider.

    Raises:
        AuthenticationError: If the provider fails or returns an empty value
    """
    if isinstance(api_key, str):
        return api_key

    try:
        resolved_key = await api_key()
    except Exception as e:
        raise AuthenticationError(
            "Failed to resolve API key from function",
            details={"error": str(e)}
        ) from e

    if not isinstance(resolved_key, str) or not resolved_key:
        raise AuthenticationError(
            "API key function must return a non-empty string",
            details={"resolved_type": type(resolved_key).__name__}
        )
    return resolved_key


@log_api_call("API request")
async def send_request(
    config: RequestConfig,
    client_options: NutrientClientOptions,
    response_type: ResponseType = ResponseType.JSON,
) -> ApiResponse:
    """
    Issue exactly one HTTP request to the service.

    Files are sent as multipart form data with each non-file data field
    JSON-encoded; requests without files carry a JSON body. No retries.

    Args:
        config: Endpoint, method, payload and optional timeout
        client_options: API key, base URL and optional shared client
        response_type: How to decode a successful response body

    Returns:
        ApiResponse with the decoded body

    Raises:
        AuthenticationError: 401/403 or unresolvable API key
        ValidationError: Other 4xx statuses
        APIError: 5xx statuses
        NetworkError: Connection failures and timeouts
        NutrientError: Anything else, code UNKNOWN_ERROR
    """
    client = client_options.http_client
    should_close_client = client is None
    if client is None:
        client = get_async_client(timeout=client_options.timeout)

    try:
        api_key = await resolve_api_key(client_options.api_key)
        url = build_url(client_options.base_url, config.endpoint)
        headers = {"Authorization": f"Bearer {api_key}"}
        if config.headers:
            headers.update(config.headers)

        request_kwargs = _prepare_request_body(config)
        timeout = config.timeout or client_options.timeout or settings.HTTP_CLIENT_TIMEOUT

        logger.info(f"Sending {config.method} {url}")
        response = await client.request(
            config.method,
            url,
            headers=headers,
            timeout=timeout,
            **request_kwargs,
        )

        return _handle_response(response, response_type)

    except NutrientError:
        raise
    except httpx.TimeoutException as e:
        raise NetworkError(
            "Request timed out",
            details={"message": str(e), "endpoint": config.endpoint, "method": config.method}
        ) from e
    except httpx.RequestError as e:
        raise NetworkError(
            "Network request failed",
            details={"message": str(e), "endpoint": config.endpoint, "method": config.method}
        ) from e
    except Exception as e:
        raise NutrientError(
            "Unexpected error occurred",
            "UNKNOWN_ERROR",
            {"error": str(e), "endpoint": config.endpoint}
        ) from e
    finally:
        if should_close_client:
            await client.aclose()


def _prepare_request_body(config: RequestConfig) -> Dict[str, Any]:
    """Build httpx keyword arguments for the request body."""
    if config.files:
        files = {
            key: (
                file_data.filename,
                file_data.data,
                file_data.content_type or DEFAULT_MIME_TYPE,
            )
            for key, file_data in config.files.items()
        }
        form_data = {}
        for key, value in (config.data or {}).items():
            if value is None:
                continue
            form_data[key] = value if isinstance(value, str) else json.dumps(value)
        return {"files": files, "data": form_data}

    if config.data is not None:
        return {"json": config.data}

    return {}


def _handle_response(response: httpx.Response, response_type: ResponseType) -> ApiResponse:
    """Raise for error statuses, otherwise decode the body."""
    if response.status_code >= 400:
        raise _create_http_error(response)

    if response_type == ResponseType.JSON:
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(
                "Invalid JSON in response body",
                details={"body": response.text[:500]},
                status_code=response.status_code
            ) from e
    elif response_type == ResponseType.TEXT:
        data = response.text
    else:
        data = response.content

    return ApiResponse(
        data=data,
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=dict(response.headers),
    )


def _create_http_error(response: httpx.Response) -> NutrientError:
    """Map an error status to the matching exception type."""
    try:
        body = response.json()
    except ValueError:
        body = response.text

    status = response.status_code
    message = _extract_error_message(body) or f"HTTP {status}: {response.reason_phrase}"
    details = body if isinstance(body, dict) else {"response": body}

    logger.error(f"Service returned HTTP {status}: {message}")

    if status in (401, 403):
        return AuthenticationError(message, details=details, status_code=status)
    if 400 <= status < 500:
        return ValidationError(message, details=details, status_code=status)
    return APIError(message, details=details, status_code=status)


def _extract_error_message(body: Any) -> Optional[str]:
    """Pick the message field out of a JSON error body."""
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return None
