"""
Pydantic models for the build service instruction graph.

Attribute names are snake_case; ``to_wire()`` emits the field names the
service expects (``rotateBy``, ``pageCount``, ``user_password`` ...) and drops
unset fields.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter


class BuildModel(BaseModel):
    """Base for every model that is serialized into build instructions."""

    model_config = {
        "populate_by_name": True,
        "extra": "forbid",
    }

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using service field names, omitting unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ============================================================================
# File handles and layout
# ============================================================================

class RemoteFileHandle(BuildModel):
    """Reference to a file the service downloads itself."""

    url: str = Field(..., description="Remote file URL")


# An asset key ("asset_0") or a remote URL reference
FileHandle = Union[str, RemoteFileHandle]


class PageRange(BuildModel):
    """Inclusive page range; negative indexes count from the end."""

    start: Optional[int] = Field(None, description="First page (0-based)")
    end: Optional[int] = Field(None, description="Last page (0-based, -1 = last)")


class PageSize(BuildModel):
    """Custom page size in points."""

    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PageMargin(BuildModel):
    """Page margins in points."""

    left: Optional[float] = None
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None


class PageLayout(BuildModel):
    """Layout used when the service renders or creates pages."""

    orientation: Optional[Literal["portrait", "landscape"]] = None
    size: Optional[Union[str, PageSize]] = Field(None, description="Named size such as 'A4' or explicit size")
    margin: Optional[PageMargin] = None


# ============================================================================
# Actions
# ============================================================================

class WatermarkDimension(BuildModel):
    """Watermark size or offset in points or percent."""

    value: float
    unit: Literal["pt", "%"] = "pt"


class RotateAction(BuildModel):
    type: Literal["rotate"] = "rotate"
    rotate_by: Literal[90, 180, 270] = Field(..., alias="rotateBy")


class OcrAction(BuildModel):
    type: Literal["ocr"] = "ocr"
    language: Union[str, List[str]] = Field(..., description="OCR language or languages")


class _WatermarkBase(BuildModel):
    type: Literal["watermark"] = "watermark"
    width: WatermarkDimension
    height: WatermarkDimension
    opacity: Optional[float] = Field(None, ge=0, le=1)
    rotation: Optional[float] = None
    top: Optional[WatermarkDimension] = None
    left: Optional[WatermarkDimension] = None
    right: Optional[WatermarkDimension] = None
    bottom: Optional[WatermarkDimension] = None


class TextWatermarkAction(_WatermarkBase):
    text: str
    font_size: Optional[int] = Field(None, alias="fontSize")
    font_color: Optional[str] = Field(None, alias="fontColor")
    font_family: Optional[str] = Field(None, alias="fontFamily")
    font_style: Optional[List[Literal["bold", "italic"]]] = Field(None, alias="fontStyle")


class ImageWatermarkAction(_WatermarkBase):
    image: FileHandle


class FlattenAction(BuildModel):
    type: Literal["flatten"] = "flatten"
    annotation_ids: Optional[List[Union[str, int]]] = Field(None, alias="annotationIds")


class ApplyInstantJsonAction(BuildModel):
    type: Literal["applyInstantJson"] = "applyInstantJson"
    file: FileHandle


class ApplyXfdfAction(BuildModel):
    type: Literal["applyXfdf"] = "applyXfdf"
    file: FileHandle
    ignore_page_rotation: Optional[bool] = Field(None, alias="ignorePageRotation")
    rich_text_enabled: Optional[bool] = Field(None, alias="richTextEnabled")


class CreateRedactionsAction(BuildModel):
    type: Literal["createRedactions"] = "createRedactions"
    strategy: Literal["text", "regex", "preset"]
    strategy_options: Dict[str, Any] = Field(..., alias="strategyOptions")
    content: Optional[Dict[str, Any]] = None


class ApplyRedactionsAction(BuildModel):
    type: Literal["applyRedactions"] = "applyRedactions"


BuildAction = Union[
    RotateAction,
    OcrAction,
    TextWatermarkAction,
    ImageWatermarkAction,
    FlattenAction,
    ApplyInstantJsonAction,
    ApplyXfdfAction,
    CreateRedactionsAction,
    ApplyRedactionsAction,
]


# ============================================================================
# Parts
# ============================================================================

class FilePart(BuildModel):
    """A registered asset or remote file contributing pages."""

    file: FileHandle
    password: Optional[str] = None
    pages: Optional[PageRange] = None
    content_type: Optional[str] = None
    layout: Optional[PageLayout] = None
    actions: Optional[List[BuildAction]] = None


class HtmlPart(BuildModel):
    """HTML rendered to pages, with auxiliary assets (CSS, images, fonts)."""

    html: FileHandle
    assets: Optional[List[str]] = None
    layout: Optional[PageLayout] = None
    actions: Optional[List[BuildAction]] = None


class NewPagePart(BuildModel):
    """Blank pages."""

    page: Literal["new"] = "new"
    page_count: Optional[int] = Field(None, alias="pageCount", ge=1)
    layout: Optional[PageLayout] = None
    actions: Optional[List[BuildAction]] = None


class DocumentReference(BuildModel):
    id: str
    layer: Optional[str] = None


class DocumentPart(BuildModel):
    """A document already stored on the service."""

    document: DocumentReference
    password: Optional[str] = None
    pages: Optional[PageRange] = None
    actions: Optional[List[BuildAction]] = None


Part = Union[FilePart, HtmlPart, NewPagePart, DocumentPart]


# ============================================================================
# Outputs
# ============================================================================

PdfUserPermission = Literal[
    "printing",
    "modification",
    "extract",
    "annotations_and_forms",
    "fill_forms",
    "extract_accessibility",
    "assemble",
    "print_high_quality",
]


class PdfMetadata(BuildModel):
    title: Optional[str] = None
    author: Optional[str] = None


class PageLabel(BuildModel):
    pages: PageRange
    label: str


class OptimizePdf(BuildModel):
    grayscale_text: Optional[bool] = Field(None, alias="grayscaleText")
    grayscale_graphics: Optional[bool] = Field(None, alias="grayscaleGraphics")
    grayscale_images: Optional[bool] = Field(None, alias="grayscaleImages")
    grayscale_form_fields: Optional[bool] = Field(None, alias="grayscaleFormFields")
    grayscale_annotations: Optional[bool] = Field(None, alias="grayscaleAnnotations")
    disable_images: Optional[bool] = Field(None, alias="disableImages")
    mrc_compression: Optional[bool] = Field(None, alias="mrcCompression")
    image_optimization_quality: Optional[int] = Field(None, alias="imageOptimizationQuality", ge=1, le=4)
    linearize: Optional[bool] = None


class _PdfOutputBase(BuildModel):
    metadata: Optional[PdfMetadata] = None
    labels: Optional[List[PageLabel]] = None
    user_password: Optional[str] = None
    owner_password: Optional[str] = None
    user_permissions: Optional[List[PdfUserPermission]] = None
    optimize: Optional[OptimizePdf] = None


class PdfOutput(_PdfOutputBase):
    type: Literal["pdf"] = "pdf"


class PdfAOutput(_PdfOutputBase):
    type: Literal["pdfa"] = "pdfa"
    conformance: Optional[Literal[
        "pdfa-1a", "pdfa-1b", "pdfa-2a", "pdfa-2u", "pdfa-2b", "pdfa-3a", "pdfa-3u"
    ]] = None
    vectorization: Optional[bool] = None
    rasterization: Optional[bool] = None


class PdfUaOutput(_PdfOutputBase):
    type: Literal["pdfua"] = "pdfua"


class ImageOutput(BuildModel):
    type: Literal["image"] = "image"
    format: Optional[Literal["png", "jpeg", "jpg", "webp"]] = None
    pages: Optional[PageRange] = None
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    dpi: Optional[int] = Field(None, gt=0)


class JsonContentOutput(BuildModel):
    type: Literal["json-content"] = "json-content"
    plain_text: Optional[bool] = Field(None, alias="plainText")
    structured_text: Optional[bool] = Field(None, alias="structuredText")
    key_value_pairs: Optional[bool] = Field(None, alias="keyValuePairs")
    tables: Optional[bool] = None
    language: Optional[Union[str, List[str]]] = None


class OfficeOutput(BuildModel):
    type: Literal["docx", "xlsx", "pptx"]


class HtmlOutput(BuildModel):
    type: Literal["html"] = "html"
    layout: Optional[Literal["page", "reflow"]] = None


class MarkdownOutput(BuildModel):
    type: Literal["markdown"] = "markdown"


BuildOutput = Annotated[
    Union[
        PdfOutput,
        PdfAOutput,
        PdfUaOutput,
        ImageOutput,
        JsonContentOutput,
        OfficeOutput,
        HtmlOutput,
        MarkdownOutput,
    ],
    Field(discriminator="type"),
]


# ============================================================================
# Instruction graph and analysis
# ============================================================================

class BuildInstructions(BuildModel):
    """The declarative job sent to /build and /analyze_build."""

    parts: List[Part] = Field(default_factory=list)
    actions: Optional[List[BuildAction]] = None
    output: Optional[BuildOutput] = None


class BuildAnalysis(BaseModel):
    """Cost and feature usage estimate returned by /analyze_build."""

    cost: Optional[float] = Field(None, description="Credits the build would consume")
    required_features: Optional[Dict[str, Any]] = Field(None, description="Features used by the build")

    model_config = {
        "extra": "allow",
    }


build_action_adapter: TypeAdapter = TypeAdapter(BuildAction)
build_output_adapter: TypeAdapter = TypeAdapter(BuildOutput)
