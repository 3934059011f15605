"""
Maps raw /build responses to typed workflow outputs.
"""
from typing import Any, Mapping, Optional

from nutrient_dws.core.constants import JSON_CONTENT_OUTPUT_TYPE, TEXT_OUTPUT_TYPES
from nutrient_dws.core.http_client import ResponseType
from nutrient_dws.models.workflow_models import (
    WorkflowBufferOutput,
    WorkflowContentOutput,
    WorkflowJsonOutput,
    WorkflowOutput,
)
from nutrient_dws.services.build_outputs import BuildOutputs


def get_response_type(output: Any) -> ResponseType:
    """Pick how the /build response body is decoded for an output directive."""
    output_type = getattr(output, "type", None)
    if output_type == JSON_CONTENT_OUTPUT_TYPE:
        return ResponseType.JSON
    if output_type in TEXT_OUTPUT_TYPES:
        return ResponseType.TEXT
    return ResponseType.BYTES


def normalize_output(
    output: Any,
    data: Any,
    headers: Optional[Mapping[str, str]] = None
) -> WorkflowOutput:
    """
    Build the typed output for a successful /build response.

    Args:
        output: The output directive the build ran with
        data: Decoded response body (JSON value, text or bytes)
        headers: Response headers

    Returns:
        WorkflowJsonOutput, WorkflowContentOutput or WorkflowBufferOutput
    """
    response_type = get_response_type(output)

    if response_type == ResponseType.JSON:
        return WorkflowJsonOutput(data=data)

    content_type = _header(headers, "content-type")
    mime_type, filename = BuildOutputs.get_mime_type_for_output(output, content_type)

    if response_type == ResponseType.TEXT:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        return WorkflowContentOutput(content=data, mime_type=mime_type, filename=filename)

    if isinstance(data, str):
        data = data.encode("utf-8")
    return WorkflowBufferOutput(buffer=bytes(data), mime_type=mime_type, filename=filename)


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None
