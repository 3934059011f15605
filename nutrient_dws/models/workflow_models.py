"""
Workflow models for build execution.

This module provides the client options handed to builders and the data
structures returned by execute and dry-run.
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Union

import httpx

from nutrient_dws.core.error_handling import NutrientError
from nutrient_dws.models.build_models import BuildAnalysis

ApiKey = Union[str, Callable[[], Awaitable[str]]]
ProgressCallback = Callable[[int, int], None]


@dataclass
class NutrientClientOptions:
    """Connection options shared by the client and its builders."""

    api_key: ApiKey
    """Literal API key or async function resolving one."""

    base_url: Optional[str] = None
    """Service base URL (settings.NUTRIENT_BASE_URL when unset)."""

    timeout: Optional[float] = None
    """Default request timeout in seconds."""

    http_client: Optional[httpx.AsyncClient] = None
    """Shared client; a temporary one is created per request when unset."""


@dataclass
class WorkflowBufferOutput:
    """Binary document output (PDF family, images, Office)."""

    buffer: bytes
    mime_type: str
    filename: str


@dataclass
class WorkflowContentOutput:
    """Text document output (HTML, Markdown)."""

    content: str
    mime_type: str
    filename: str


@dataclass
class WorkflowJsonOutput:
    """Structured extraction output (json-content)."""

    data: Any


WorkflowOutput = Union[WorkflowBufferOutput, WorkflowContentOutput, WorkflowJsonOutput]


@dataclass
class WorkflowError:
    """A failure captured during execute or dry-run."""

    step: int
    """Step at which the failure happened (0 for dry-run)."""

    error: NutrientError


@dataclass
class WorkflowResult:
    """Result from build execution."""

    success: bool = False
    output: Optional[WorkflowOutput] = None
    errors: List[WorkflowError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if execution captured an error."""
        return len(self.errors) > 0


@dataclass
class WorkflowDryRunResult:
    """Result from /analyze_build."""

    success: bool = False
    analysis: Optional[BuildAnalysis] = None
    errors: List[WorkflowError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0
