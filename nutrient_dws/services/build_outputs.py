"""
Factory functions for output directives and their mime type / filename.
"""
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from nutrient_dws.core.constants import (
    DEFAULT_FILENAME,
    DEFAULT_MIME_TYPE,
    OFFICE_MIME_TYPES,
    PDF_OUTPUT_TYPES,
)
from nutrient_dws.models.build_models import (
    HtmlOutput,
    ImageOutput,
    JsonContentOutput,
    MarkdownOutput,
    OfficeOutput,
    PdfAOutput,
    PdfOutput,
    PdfUaOutput,
)


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class BuildOutputs:
    """Factories for the output directives supported by the build service.

    PDF-family options: metadata, labels, user_password, owner_password,
    user_permissions, optimize.
    """

    @staticmethod
    def pdf(**options: Any) -> PdfOutput:
        return PdfOutput(**_drop_none(options))

    @staticmethod
    def pdfa(**options: Any) -> PdfAOutput:
        """PDF/A; also accepts conformance, vectorization, rasterization."""
        return PdfAOutput(**_drop_none(options))

    @staticmethod
    def pdfua(**options: Any) -> PdfUaOutput:
        return PdfUaOutput(**_drop_none(options))

    @staticmethod
    def image(
        format: Optional[Literal["png", "jpeg", "jpg", "webp"]] = None,
        **options: Any
    ) -> ImageOutput:
        """Image render; options: pages, width, height, dpi."""
        return ImageOutput(format=format, **_drop_none(options))

    @staticmethod
    def json_content(
        plain_text: Optional[bool] = None,
        structured_text: Optional[bool] = None,
        key_value_pairs: Optional[bool] = None,
        tables: Optional[bool] = None,
        language: Optional[Union[str, List[str]]] = None
    ) -> JsonContentOutput:
        """Structured extraction; each flag enables one facet of the result."""
        return JsonContentOutput(
            plain_text=plain_text,
            structured_text=structured_text,
            key_value_pairs=key_value_pairs,
            tables=tables,
            language=language,
        )

    @staticmethod
    def office(format: Literal["docx", "xlsx", "pptx"]) -> OfficeOutput:
        return OfficeOutput(type=format)

    @staticmethod
    def html(layout: Optional[Literal["page", "reflow"]] = None) -> HtmlOutput:
        return HtmlOutput(layout=layout)

    @staticmethod
    def markdown() -> MarkdownOutput:
        return MarkdownOutput()

    @staticmethod
    def get_mime_type_for_output(
        output: Any,
        content_type: Optional[str] = None
    ) -> Tuple[str, str]:
        """
        Derive (mime_type, filename) from an output directive.

        Args:
            output: Output directive model
            content_type: Response content-type, used for images without a format

        Returns:
            Tuple of mime type and default filename
        """
        output_type = getattr(output, "type", None)

        if output_type in PDF_OUTPUT_TYPES:
            return "application/pdf", "output.pdf"

        if output_type == "image":
            image_format = getattr(output, "format", None)
            if image_format:
                mime_format = "jpeg" if image_format == "jpg" else image_format
                return f"image/{mime_format}", f"output.{image_format}"

            header_type = (content_type or "").split(";")[0].strip().lower()
            if header_type.startswith("image/"):
                extension = header_type.split("/", 1)[1]
                return header_type, f"output.{'jpg' if extension == 'jpeg' else extension}"
            return "image/png", "output.png"

        if output_type in OFFICE_MIME_TYPES:
            return OFFICE_MIME_TYPES[output_type], f"output.{output_type}"

        if output_type == "html":
            return "text/html", "output.html"

        if output_type == "markdown":
            return "text/markdown", "output.md"

        return DEFAULT_MIME_TYPE, DEFAULT_FILENAME
