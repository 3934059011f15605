"""
Workflow module for composing build requests.

This module provides the staged builder and the pieces it is made of: asset
registration, deferred action resolution and output normalization.
"""
from .workflow_types import WorkflowStage, ALLOWED_STAGES, NEXT_STAGE
from .asset_registry import AssetRegistry
from .action_resolver import ActionResolver, ApplicableAction
from .result_normalizer import get_response_type, normalize_output
from .workflow_builder import WorkflowBuilder

__all__ = [
    "WorkflowStage",
    "ALLOWED_STAGES",
    "NEXT_STAGE",
    "AssetRegistry",
    "ActionResolver",
    "ApplicableAction",
    "get_response_type",
    "normalize_output",
    "WorkflowBuilder",
]
