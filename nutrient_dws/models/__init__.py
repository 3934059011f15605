"""Pydantic models for build instructions and dataclasses for workflow results."""

from .build_models import (
    BuildModel,
    RemoteFileHandle,
    FileHandle,
    PageRange,
    PageSize,
    PageMargin,
    PageLayout,
    WatermarkDimension,
    RotateAction,
    OcrAction,
    TextWatermarkAction,
    ImageWatermarkAction,
    FlattenAction,
    ApplyInstantJsonAction,
    ApplyXfdfAction,
    CreateRedactionsAction,
    ApplyRedactionsAction,
    BuildAction,
    FilePart,
    HtmlPart,
    NewPagePart,
    DocumentReference,
    DocumentPart,
    Part,
    PdfMetadata,
    PageLabel,
    OptimizePdf,
    PdfOutput,
    PdfAOutput,
    PdfUaOutput,
    ImageOutput,
    JsonContentOutput,
    OfficeOutput,
    HtmlOutput,
    MarkdownOutput,
    BuildOutput,
    BuildInstructions,
    BuildAnalysis,
)
from .file_inputs import (
    FilePathInput,
    BufferInput,
    UrlInput,
    NormalizedFileData,
    FileInput,
)
from .workflow_models import (
    NutrientClientOptions,
    WorkflowBufferOutput,
    WorkflowContentOutput,
    WorkflowJsonOutput,
    WorkflowOutput,
    WorkflowError,
    WorkflowResult,
    WorkflowDryRunResult,
)

__all__ = [
    "BuildModel",
    "RemoteFileHandle",
    "FileHandle",
    "PageRange",
    "PageSize",
    "PageMargin",
    "PageLayout",
    "WatermarkDimension",
    "RotateAction",
    "OcrAction",
    "TextWatermarkAction",
    "ImageWatermarkAction",
    "FlattenAction",
    "ApplyInstantJsonAction",
    "ApplyXfdfAction",
    "CreateRedactionsAction",
    "ApplyRedactionsAction",
    "BuildAction",
    "FilePart",
    "HtmlPart",
    "NewPagePart",
    "DocumentReference",
    "DocumentPart",
    "Part",
    "PdfMetadata",
    "PageLabel",
    "OptimizePdf",
    "PdfOutput",
    "PdfAOutput",
    "PdfUaOutput",
    "ImageOutput",
    "JsonContentOutput",
    "OfficeOutput",
    "HtmlOutput",
    "MarkdownOutput",
    "BuildOutput",
    "BuildInstructions",
    "BuildAnalysis",
    "FilePathInput",
    "BufferInput",
    "UrlInput",
    "NormalizedFileData",
    "FileInput",
    "NutrientClientOptions",
    "WorkflowBufferOutput",
    "WorkflowContentOutput",
    "WorkflowJsonOutput",
    "WorkflowOutput",
    "WorkflowError",
    "WorkflowResult",
    "WorkflowDryRunResult",
]
