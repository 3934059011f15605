"""
Workflow builder for the composable build API.

Accumulates parts, document-wide actions and a single output directive into
one instruction graph, then executes it with exactly one request. Files are
registered as assets while the graph is built and only read when the build
is executed. A builder is single-use: after execute() or dry_run() every
further call is rejected.
"""
import asyncio
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Literal, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from nutrient_dws.core.constants import (
    ANALYZE_BUILD_ENDPOINT,
    BUILD_ENDPOINT,
    EXECUTE_TOTAL_STEPS,
)
from nutrient_dws.core.error_handling import NutrientError, ValidationError, request_id_var
from nutrient_dws.core.http_client import RequestConfig, ResponseType, send_request
from nutrient_dws.models.build_models import (
    BuildAnalysis,
    BuildInstructions,
    DocumentPart,
    DocumentReference,
    FilePart,
    HtmlPart,
    NewPagePart,
    PdfOutput,
    build_action_adapter,
    build_output_adapter,
)
from nutrient_dws.models.file_inputs import NormalizedFileData
from nutrient_dws.models.workflow_models import (
    NutrientClientOptions,
    ProgressCallback,
    WorkflowDryRunResult,
    WorkflowError,
    WorkflowResult,
)
from nutrient_dws.services.build_outputs import BuildOutputs
from nutrient_dws.services.file_inputs import (
    is_remote_file_input,
    process_file_input,
    validate_file_input,
)
from nutrient_dws.workflows.action_resolver import ActionResolver, ApplicableAction
from nutrient_dws.workflows.asset_registry import AssetRegistry
from nutrient_dws.workflows.result_normalizer import get_response_type, normalize_output
from nutrient_dws.workflows.workflow_types import ALLOWED_STAGES, NEXT_STAGE, WorkflowStage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_STAGE_HINTS = {
    "part": "parts must be added before any action or output",
    "action": "actions need at least one part and must come before the output",
    "output": "an output needs at least one part",
}


class WorkflowBuilder:
    """Fluent builder for one build request.

    Call order is checked at runtime: parts, then document actions, then the
    output. Parts are required; actions and output are optional (the output
    defaults to PDF).

    Example:
        result = await (
            client.workflow()
            .add_file_part("contract.docx")
            .apply_action(BuildActions.ocr("english"))
            .output_pdf()
            .execute()
        )
    """

    def __init__(self, client_options: NutrientClientOptions):
        self.client_options = client_options
        self.build_instructions = BuildInstructions()
        self.assets = AssetRegistry()
        self.stage = WorkflowStage.INITIAL
        self.current_step = 0
        self._resolver = ActionResolver(self.assets)

    @property
    def is_executed(self) -> bool:
        return self.stage == WorkflowStage.EXECUTED

    @property
    def instructions(self) -> Dict[str, Any]:
        """Current instruction graph in wire form."""
        return self.build_instructions.to_wire()

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------
    def add_file_part(
        self,
        file: Any,
        options: Optional[Dict[str, Any]] = None,
        actions: Optional[Sequence[ApplicableAction]] = None
    ) -> "WorkflowBuilder":
        """Add a file (local or URL) to the document.

        Args:
            file: Path, URL, bytes, stream or an explicit input object
            options: password, pages, content_type, layout
            actions: Actions applied to this part only
        """
        self._begin("part", "add_file_part")
        template = self._validated(FilePart, file="", **self._options(options, "file", "actions"))

        with self._rollback_on_error():
            file_handle = self._resolver.resolve_file_handle(file)
            part = template.model_copy(update={
                "file": file_handle,
                "actions": self._process_actions(actions),
            })

        return self._append_part(part)

    def add_html_part(
        self,
        html: Any,
        assets: Optional[Sequence[Any]] = None,
        options: Optional[Dict[str, Any]] = None,
        actions: Optional[Sequence[ApplicableAction]] = None
    ) -> "WorkflowBuilder":
        """Add an HTML document rendered to pages.

        Args:
            html: HTML file input (local or URL)
            assets: Local files the HTML references (CSS, images, fonts)
            options: layout
            actions: Actions applied to this part only

        Raises:
            ValidationError: If an asset is invalid or a URL
        """
        self._begin("part", "add_html_part")
        template = self._validated(HtmlPart, html="", **self._options(options, "html", "assets", "actions"))

        for asset in assets or []:
            if not validate_file_input(asset):
                raise ValidationError("Invalid HTML asset provided", details={"input": repr(asset)})
            if is_remote_file_input(asset):
                raise ValidationError("Assets file input cannot be an URL", details={"input": repr(asset)})

        with self._rollback_on_error():
            html_handle = self._resolver.resolve_file_handle(html)
            asset_keys = [self.assets.register(asset) for asset in assets] if assets is not None else None

            part = template.model_copy(update={
                "html": html_handle,
                "assets": asset_keys,
                "actions": self._process_actions(actions),
            })

        return self._append_part(part)

    def add_new_page(
        self,
        options: Optional[Dict[str, Any]] = None,
        actions: Optional[Sequence[ApplicableAction]] = None
    ) -> "WorkflowBuilder":
        """Add blank pages; options: page_count, layout."""
        self._begin("part", "add_new_page")
        template = self._validated(NewPagePart, **self._options(options, "page", "actions"))

        with self._rollback_on_error():
            part = template.model_copy(update={"actions": self._process_actions(actions)})
        return self._append_part(part)

    def add_document_part(
        self,
        document_id: str,
        options: Optional[Dict[str, Any]] = None,
        actions: Optional[Sequence[ApplicableAction]] = None
    ) -> "WorkflowBuilder":
        """Add a document stored on the service; options: layer, password, pages."""
        self._begin("part", "add_document_part")
        document_options = self._options(options, "document", "actions")
        layer = document_options.pop("layer", None)

        template = self._validated(
            DocumentPart,
            document=DocumentReference(id=document_id, layer=layer),
            **document_options
        )

        with self._rollback_on_error():
            part = template.model_copy(update={"actions": self._process_actions(actions)})
        return self._append_part(part)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def apply_actions(self, actions: Sequence[ApplicableAction]) -> "WorkflowBuilder":
        """Apply actions to the whole assembled document, in order."""
        self._begin("action", "apply_actions")

        with self._rollback_on_error():
            processed = self._process_actions(actions) or []
        if self.build_instructions.actions is None:
            self.build_instructions.actions = []
        self.build_instructions.actions.extend(processed)

        self.stage = NEXT_STAGE["action"]
        logger.debug(f"Applied {len(processed)} document action(s)")
        return self

    def apply_action(self, action: ApplicableAction) -> "WorkflowBuilder":
        return self.apply_actions([action])

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def output(self, output: Any) -> "WorkflowBuilder":
        """Set the output directive, replacing any previous one."""
        self._begin("output", "output")

        if not isinstance(output, BaseModel):
            try:
                output = build_output_adapter.validate_python(output)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid output configuration",
                    details={"errors": _format_errors(e)}
                ) from e

        self.build_instructions.output = output
        self.stage = NEXT_STAGE["output"]
        logger.debug(f"Output set to {output.type}")
        return self

    def output_pdf(self, **options: Any) -> "WorkflowBuilder":
        """PDF output; options: metadata, labels, user_password, owner_password,
        user_permissions, optimize."""
        return self._output_from_factory("output_pdf", BuildOutputs.pdf, **options)

    def output_pdf_a(self, **options: Any) -> "WorkflowBuilder":
        """PDF/A output; PDF options plus conformance, vectorization, rasterization."""
        return self._output_from_factory("output_pdf_a", BuildOutputs.pdfa, **options)

    def output_pdf_ua(self, **options: Any) -> "WorkflowBuilder":
        return self._output_from_factory("output_pdf_ua", BuildOutputs.pdfua, **options)

    def output_image(
        self,
        format: Literal["png", "jpeg", "jpg", "webp"],
        pages: Optional[Dict[str, int]] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        dpi: Optional[int] = None
    ) -> "WorkflowBuilder":
        """Render pages to images.

        Raises:
            ValidationError: If none of width, height or dpi is given
        """
        self._begin("output", "output_image")
        if not dpi and not height and not width:
            raise ValidationError(
                "Image output requires at least one of the following options: dpi, height, width"
            )
        return self._output_from_factory(
            "output_image", BuildOutputs.image, format=format, pages=pages, width=width, height=height, dpi=dpi
        )

    def output_office(self, format: Literal["docx", "xlsx", "pptx"]) -> "WorkflowBuilder":
        return self._output_from_factory("output_office", BuildOutputs.office, format)

    def output_html(self, layout: Literal["page", "reflow"] = "page") -> "WorkflowBuilder":
        return self._output_from_factory("output_html", BuildOutputs.html, layout)

    def output_markdown(self) -> "WorkflowBuilder":
        return self._output_from_factory("output_markdown", BuildOutputs.markdown)

    def output_json(
        self,
        plain_text: Optional[bool] = None,
        structured_text: Optional[bool] = None,
        key_value_pairs: Optional[bool] = None,
        tables: Optional[bool] = None,
        language: Optional[Any] = None
    ) -> "WorkflowBuilder":
        """Extract content as JSON; each flag enables one facet."""
        return self._output_from_factory(
            "output_json",
            BuildOutputs.json_content,
            plain_text=plain_text,
            structured_text=structured_text,
            key_value_pairs=key_value_pairs,
            tables=tables,
            language=language,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    async def execute(
        self,
        on_progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None
    ) -> WorkflowResult:
        """Execute the build with a single /build request.

        Failures are returned in the result instead of raised.

        Args:
            on_progress: Called with (step, total) at each of the 3 steps
            timeout: Request timeout in seconds, passed to the transport

        Returns:
            WorkflowResult with the typed output or exactly one error

        Raises:
            ValidationError: If this builder was already executed
        """
        self._ensure_not_executed()
        self.stage = WorkflowStage.EXECUTED
        self.current_step = 0
        token = request_id_var.set(str(uuid.uuid4()))

        result = WorkflowResult()

        try:
            self.current_step = 1
            self._report_progress(on_progress)
            self._validate()

            self.current_step = 2
            self._report_progress(on_progress)

            output_config = self.build_instructions.output
            response_type = get_response_type(output_config)
            files = await self._prepare_files()

            logger.info(
                f"Executing build: parts={len(self.build_instructions.parts)}, "
                f"assets={len(files)}, output={output_config.type}"
            )

            response = await send_request(
                RequestConfig(
                    endpoint=BUILD_ENDPOINT,
                    method="POST",
                    data={"instructions": self.build_instructions.to_wire()},
                    files=files or None,
                    timeout=timeout,
                ),
                self.client_options,
                response_type,
            )

            self.current_step = 3
            self._report_progress(on_progress)

            result.output = normalize_output(output_config, response.data, response.headers)
            result.success = True

        except Exception as e:
            logger.error(f"Workflow failed at step {self.current_step}: {e}")
            result.errors.append(WorkflowError(
                step=self.current_step,
                error=NutrientError.wrap(e, f"Workflow failed at step {self.current_step}"),
            ))
        finally:
            self._cleanup()
            request_id_var.reset(token)

        return result

    async def dry_run(self, timeout: Optional[float] = None) -> WorkflowDryRunResult:
        """Ask /analyze_build to estimate the build without uploading files.

        The builder is frozen afterwards, exactly as after execute().

        Raises:
            ValidationError: If this builder was already executed
        """
        self._ensure_not_executed()
        self.stage = WorkflowStage.EXECUTED
        token = request_id_var.set(str(uuid.uuid4()))

        result = WorkflowDryRunResult()

        try:
            self._validate()

            response = await send_request(
                RequestConfig(
                    endpoint=ANALYZE_BUILD_ENDPOINT,
                    method="POST",
                    data={"instructions": self.build_instructions.to_wire()},
                    timeout=timeout,
                ),
                self.client_options,
                ResponseType.JSON,
            )

            result.analysis = BuildAnalysis.model_validate(response.data)
            result.success = True

        except Exception as e:
            logger.error(f"Dry run failed: {e}")
            result.errors.append(WorkflowError(step=0, error=NutrientError.wrap(e, "Dry run failed")))
        finally:
            self._cleanup()
            request_id_var.reset(token)

        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _ensure_not_executed(self):
        if self.is_executed:
            raise ValidationError(
                "This workflow has already been executed. "
                "Create a new workflow builder for additional operations."
            )

    def _begin(self, kind: str, method_name: str):
        """Reject calls after execution or out of stage order."""
        self._ensure_not_executed()
        if self.stage not in ALLOWED_STAGES[kind]:
            raise ValidationError(
                f"Cannot call {method_name}() at the '{self.stage}' stage: {_STAGE_HINTS[kind]}",
                details={"stage": str(self.stage), "method": method_name}
            )

    @contextmanager
    def _rollback_on_error(self):
        """Unregister assets added by a builder call that raises."""
        snapshot = self.assets.snapshot()
        try:
            yield
        except Exception:
            self.assets.restore(snapshot)
            raise

    def _append_part(self, part: BaseModel) -> "WorkflowBuilder":
        self.build_instructions.parts.append(part)
        self.stage = NEXT_STAGE["part"]
        logger.debug(f"Added {type(part).__name__} #{len(self.build_instructions.parts)}")
        return self

    def _output_from_factory(self, method_name: str, factory, *args: Any, **kwargs: Any) -> "WorkflowBuilder":
        self._begin("output", method_name)
        try:
            directive = factory(*args, **kwargs)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid output configuration",
                details={"errors": _format_errors(e)}
            ) from e
        return self.output(directive)

    def _process_actions(self, actions: Optional[Sequence[ApplicableAction]]) -> Optional[List[Any]]:
        """Resolve actions left to right; empty lists become None."""
        if not actions:
            return None
        return [self._coerce_action(self._resolver.resolve_action(action)) for action in actions]

    @staticmethod
    def _coerce_action(action: Any) -> Any:
        if isinstance(action, BaseModel):
            return action
        try:
            return build_action_adapter.validate_python(action)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid action",
                details={"action": repr(action), "errors": _format_errors(e)}
            ) from e

    @staticmethod
    def _options(options: Optional[Dict[str, Any]], *reserved: str) -> Dict[str, Any]:
        options = dict(options or {})
        clashes = [key for key in reserved if key in options]
        if clashes:
            raise ValidationError(
                f"Options cannot set {', '.join(clashes)}; pass them as arguments instead",
                details={"options": sorted(options)}
            )
        return options

    @staticmethod
    def _validated(model_cls: Type[M], **fields: Any) -> M:
        try:
            return model_cls(**fields)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {model_cls.__name__} options",
                details={"errors": _format_errors(e)}
            ) from e

    def _validate(self):
        """Require at least one part and default the output to PDF."""
        if not self.build_instructions.parts:
            raise ValidationError("Workflow has no parts to execute")

        if self.build_instructions.output is None:
            self.build_instructions.output = PdfOutput()

    async def _prepare_files(self) -> Dict[str, NormalizedFileData]:
        """Materialize every registered asset concurrently."""
        entries = list(self.assets.items())
        normalized = await asyncio.gather(
            *(process_file_input(file_input) for _, file_input in entries)
        )
        return {key: data for (key, _), data in zip(entries, normalized)}

    def _report_progress(self, on_progress: Optional[ProgressCallback]):
        if on_progress is not None:
            on_progress(self.current_step, EXECUTE_TOTAL_STEPS)

    def _cleanup(self):
        self.assets.clear()
        self.current_step = 0
        self.stage = WorkflowStage.EXECUTED

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"stage={self.stage}, "
            f"parts={len(self.build_instructions.parts)}, "
            f"assets={len(self.assets)}"
            ")"
        )


def _format_errors(error: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
        for err in error.errors()
    ]
