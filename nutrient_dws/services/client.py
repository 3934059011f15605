"""
Client facade for the document build service.

Holds connection options, hands out workflow builders and offers one-call
helpers for common builds. Every helper is a small workflow underneath and
raises the workflow's error instead of returning a result object.
"""
import logging
from typing import Any, Dict, List, Literal, Optional, Sequence

import httpx

from nutrient_dws.core.config import settings
from nutrient_dws.core.constants import ACCOUNT_INFO_ENDPOINT, OFFICE_OUTPUT_TYPES
from nutrient_dws.core.error_handling import ValidationError
from nutrient_dws.core.http_client import (
    RequestConfig,
    ResponseType,
    get_async_client,
    send_request,
)
from nutrient_dws.models.workflow_models import (
    ApiKey,
    NutrientClientOptions,
    WorkflowBufferOutput,
    WorkflowContentOutput,
    WorkflowJsonOutput,
    WorkflowOutput,
    WorkflowResult,
)
from nutrient_dws.services.build_actions import BuildActions
from nutrient_dws.services.file_inputs import validate_file_input
from nutrient_dws.workflows.workflow_builder import WorkflowBuilder

logger = logging.getLogger(__name__)

ConvertFormat = Literal[
    "pdf", "pdfa", "pdfua", "docx", "xlsx", "pptx", "png", "jpeg", "jpg", "webp", "html", "markdown"
]

# Resolution used when converting to images
CONVERT_IMAGE_DPI = 300


class NutrientClient:
    """Entry point for the build service.

    Example:
        async with NutrientClient(api_key="...") as client:
            pdf = await client.convert("report.docx", "pdf")
            result = await client.workflow().add_file_part("a.pdf").execute()
    """

    def __init__(
        self,
        api_key: Optional[ApiKey] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """Initialize the client.

        Args:
            api_key: API key or async function returning one (defaults to
                settings.NUTRIENT_API_KEY)
            base_url: Service base URL (defaults to settings.NUTRIENT_BASE_URL)
            timeout: Default request timeout in seconds

        Raises:
            ValidationError: If no usable API key is configured
        """
        api_key = api_key if api_key is not None else settings.NUTRIENT_API_KEY
        self._validate_options(api_key, base_url)

        self.options = NutrientClientOptions(
            api_key=api_key,
            base_url=base_url or settings.NUTRIENT_BASE_URL,
            timeout=timeout,
        )

        logger.info(f"Initialized {self.__class__.__name__} for {self.options.base_url}")

    @staticmethod
    def _validate_options(api_key: Any, base_url: Any) -> None:
        if not api_key:
            raise ValidationError(
                "API key is required: pass api_key or set NUTRIENT_API_KEY"
            )
        if not isinstance(api_key, str) and not callable(api_key):
            raise ValidationError(
                "API key must be a string or a function returning one",
                details={"api_key_type": type(api_key).__name__}
            )
        if base_url is not None and not isinstance(base_url, str):
            raise ValidationError(
                "Base URL must be a string",
                details={"base_url_type": type(base_url).__name__}
            )

    async def __aenter__(self):
        """Share one HTTP client across every request made inside the block."""
        self.options.http_client = get_async_client(timeout=self.options.timeout)
        logger.debug(f"{self.__class__.__name__} context manager entered")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        logger.debug(f"{self.__class__.__name__} context manager exited")

    async def close(self):
        """Close the shared HTTP client; safe to call more than once."""
        client: Optional[httpx.AsyncClient] = self.options.http_client
        if client is not None:
            self.options.http_client = None
            await client.aclose()

    def workflow(self) -> WorkflowBuilder:
        """Start a new single-use workflow."""
        return WorkflowBuilder(self.options)

    async def get_account_info(self) -> Dict[str, Any]:
        """Fetch account and subscription details."""
        response = await send_request(
            RequestConfig(endpoint=ACCOUNT_INFO_ENDPOINT, method="GET"),
            self.options,
            ResponseType.JSON,
        )
        return response.data

    # ------------------------------------------------------------------
    # One-call helpers
    # ------------------------------------------------------------------
    async def convert(self, file: Any, target_format: ConvertFormat) -> WorkflowOutput:
        """Convert a document to another format.

        Raises:
            ValidationError: If the format is not supported
        """
        builder = self.workflow().add_file_part(file)

        if target_format == "pdf":
            builder.output_pdf()
        elif target_format == "pdfa":
            builder.output_pdf_a()
        elif target_format == "pdfua":
            builder.output_pdf_ua()
        elif target_format in OFFICE_OUTPUT_TYPES:
            builder.output_office(target_format)
        elif target_format in ("png", "jpeg", "jpg", "webp"):
            builder.output_image(target_format, dpi=CONVERT_IMAGE_DPI)
        elif target_format == "html":
            builder.output_html()
        elif target_format == "markdown":
            builder.output_markdown()
        else:
            raise ValidationError(
                f"Unsupported target format: {target_format}",
                details={"target_format": target_format}
            )

        return self._process_result(await builder.execute())

    async def merge(self, files: Sequence[Any]) -> WorkflowBufferOutput:
        """Merge documents into one PDF, in the given order."""
        if len(files) < 2:
            raise ValidationError("At least 2 files are required for merge operation")

        builder = self.workflow()
        for file in files:
            builder.add_file_part(file)

        return self._process_result(await builder.output_pdf().execute())

    async def ocr(self, file: Any, language: Any) -> WorkflowBufferOutput:
        """Make a scanned document searchable."""
        builder = self.workflow().add_file_part(file, actions=[BuildActions.ocr(language)])
        return self._process_result(await builder.output_pdf().execute())

    async def rotate(
        self,
        file: Any,
        angle: Literal[90, 180, 270],
        pages: Optional[Dict[str, int]] = None
    ) -> WorkflowBufferOutput:
        """Rotate a document, or only a page range of it."""
        options = {"pages": pages} if pages is not None else None
        builder = self.workflow().add_file_part(
            file, options=options, actions=[BuildActions.rotate(angle)]
        )
        return self._process_result(await builder.output_pdf().execute())

    async def watermark_text(
        self,
        file: Any,
        text: str,
        options: Optional[Dict[str, Any]] = None
    ) -> WorkflowBufferOutput:
        """Stamp a text watermark on every page.

        Options default to a 100% x 100% box; any BuildActions.watermark_text
        option may be passed.
        """
        watermark_options = dict(options or {})
        width = watermark_options.pop("width", {"value": 100, "unit": "%"})
        height = watermark_options.pop("height", {"value": 100, "unit": "%"})

        builder = self.workflow().add_file_part(file).apply_action(
            BuildActions.watermark_text(text, width, height, **watermark_options)
        )
        return self._process_result(await builder.output_pdf().execute())

    async def flatten(
        self,
        file: Any,
        annotation_ids: Optional[List[Any]] = None
    ) -> WorkflowBufferOutput:
        builder = self.workflow().add_file_part(file).apply_action(
            BuildActions.flatten(annotation_ids)
        )
        return self._process_result(await builder.output_pdf().execute())

    async def extract_text(self, file: Any) -> WorkflowJsonOutput:
        builder = self.workflow().add_file_part(file).output_json(plain_text=True)
        return self._process_result(await builder.execute())

    async def extract_tables(self, file: Any) -> WorkflowJsonOutput:
        builder = self.workflow().add_file_part(file).output_json(tables=True)
        return self._process_result(await builder.execute())

    async def extract_markdown(self, file: Any) -> WorkflowContentOutput:
        builder = self.workflow().add_file_part(file).output_markdown()
        return self._process_result(await builder.execute())

    async def password_protect(
        self,
        file: Any,
        user_password: str,
        owner_password: str,
        permissions: Optional[List[str]] = None
    ) -> WorkflowBufferOutput:
        """Encrypt a PDF with user and owner passwords."""
        if not validate_file_input(file):
            raise ValidationError("Invalid file input provided", details={"input": repr(file)})

        builder = self.workflow().add_file_part(file).output_pdf(
            user_password=user_password,
            owner_password=owner_password,
            user_permissions=permissions,
        )
        return self._process_result(await builder.execute())

    @staticmethod
    def _process_result(result: WorkflowResult) -> Any:
        """Return the output of a successful workflow or raise its first error."""
        if not result.success or result.output is None:
            if result.errors:
                raise result.errors[0].error
            raise ValidationError("Workflow completed without output")
        return result.output

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.options.base_url}, "
            f"timeout={self.options.timeout}"
            ")"
        )
