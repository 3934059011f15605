"""
Python client for the Nutrient DWS document build service.

Example:
    from nutrient_dws import BuildActions, NutrientClient

    async with NutrientClient(api_key="...") as client:
        result = await (
            client.workflow()
            .add_file_part("scan.pdf", actions=[BuildActions.ocr("english")])
            .output_pdf()
            .execute()
        )
"""
from nutrient_dws.core.error_handling import (
    NutrientError,
    ValidationError,
    APIError,
    AuthenticationError,
    NetworkError,
)
from nutrient_dws.models import (
    FilePathInput,
    BufferInput,
    UrlInput,
    WorkflowBufferOutput,
    WorkflowContentOutput,
    WorkflowJsonOutput,
    WorkflowError,
    WorkflowResult,
    WorkflowDryRunResult,
)
from nutrient_dws.services.build_actions import BuildActions
from nutrient_dws.services.build_outputs import BuildOutputs
from nutrient_dws.services.client import NutrientClient
from nutrient_dws.workflows.workflow_builder import WorkflowBuilder

__version__ = "1.0.0"

__all__ = [
    "NutrientClient",
    "WorkflowBuilder",
    "BuildActions",
    "BuildOutputs",
    "NutrientError",
    "ValidationError",
    "APIError",
    "AuthenticationError",
    "NetworkError",
    "FilePathInput",
    "BufferInput",
    "UrlInput",
    "WorkflowBufferOutput",
    "WorkflowContentOutput",
    "WorkflowJsonOutput",
    "WorkflowError",
    "WorkflowResult",
    "WorkflowDryRunResult",
    "__version__",
]
