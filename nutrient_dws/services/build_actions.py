"""
Factory functions for build actions.

Actions that need a file (image watermark, Instant JSON, XFDF) are returned as
ActionWithFileInput: the file is registered by the builder when the action is
attached, and the concrete action is created from the resulting handle.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Union

from nutrient_dws.models.build_models import (
    ApplyInstantJsonAction,
    ApplyRedactionsAction,
    ApplyXfdfAction,
    BuildAction,
    CreateRedactionsAction,
    FileHandle,
    FlattenAction,
    ImageWatermarkAction,
    OcrAction,
    RotateAction,
    TextWatermarkAction,
    WatermarkDimension,
)
from nutrient_dws.models.file_inputs import FileInput

Dimension = Union[WatermarkDimension, Dict[str, Any]]

# Stands in for the asset key while deferred action options are validated
PENDING_HANDLE = ""


@dataclass
class ActionWithFileInput:
    """An action waiting for its file to be registered."""

    file_input: FileInput
    create_action: Callable[[FileHandle], BuildAction]


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class BuildActions:
    """Factories for the actions supported by the build service."""

    @staticmethod
    def ocr(language: Union[str, List[str]]) -> OcrAction:
        """OCR with one or more languages (e.g. "english", ["english", "german"])."""
        return OcrAction(language=language)

    @staticmethod
    def rotate(rotate_by: Literal[90, 180, 270]) -> RotateAction:
        return RotateAction(rotate_by=rotate_by)

    @staticmethod
    def watermark_text(
        text: str,
        width: Dimension,
        height: Dimension,
        **options: Any
    ) -> TextWatermarkAction:
        """Text watermark.

        Options: opacity, rotation, font_size, font_color, font_family,
        font_style, top, left, right, bottom.
        """
        return TextWatermarkAction(text=text, width=width, height=height, **_drop_none(options))

    @staticmethod
    def watermark_image(
        image: FileInput,
        width: Dimension,
        height: Dimension,
        **options: Any
    ) -> ActionWithFileInput:
        """Image watermark; the image is uploaded with the build."""
        template = ImageWatermarkAction(
            image=PENDING_HANDLE, width=width, height=height, **_drop_none(options)
        )
        return ActionWithFileInput(
            file_input=image,
            create_action=lambda handle: template.model_copy(update={"image": handle}),
        )

    @staticmethod
    def flatten(annotation_ids: Optional[List[Union[str, int]]] = None) -> FlattenAction:
        """Flatten all annotations, or only the given ones."""
        return FlattenAction(annotation_ids=annotation_ids)

    @staticmethod
    def apply_instant_json(file: FileInput) -> ActionWithFileInput:
        """Import annotations from an Instant JSON file."""
        return ActionWithFileInput(
            file_input=file,
            create_action=lambda handle: ApplyInstantJsonAction(file=handle),
        )

    @staticmethod
    def apply_xfdf(
        file: FileInput,
        ignore_page_rotation: Optional[bool] = None,
        rich_text_enabled: Optional[bool] = None
    ) -> ActionWithFileInput:
        """Import annotations from an XFDF file."""
        template = ApplyXfdfAction(
            file=PENDING_HANDLE,
            ignore_page_rotation=ignore_page_rotation,
            rich_text_enabled=rich_text_enabled,
        )
        return ActionWithFileInput(
            file_input=file,
            create_action=lambda handle: template.model_copy(update={"file": handle}),
        )

    @staticmethod
    def create_redactions_text(
        text: str,
        case_sensitive: Optional[bool] = None,
        include_annotations: Optional[bool] = None,
        start: Optional[int] = None,
        limit: Optional[int] = None,
        content: Optional[Dict[str, Any]] = None
    ) -> CreateRedactionsAction:
        """Mark every occurrence of a text for redaction."""
        return CreateRedactionsAction(
            strategy="text",
            strategy_options=_drop_none({
                "text": text,
                "caseSensitive": case_sensitive,
                "includeAnnotations": include_annotations,
                "start": start,
                "limit": limit,
            }),
            content=content,
        )

    @staticmethod
    def create_redactions_regex(
        regex: str,
        case_sensitive: Optional[bool] = None,
        include_annotations: Optional[bool] = None,
        start: Optional[int] = None,
        limit: Optional[int] = None,
        content: Optional[Dict[str, Any]] = None
    ) -> CreateRedactionsAction:
        """Mark every regex match for redaction."""
        return CreateRedactionsAction(
            strategy="regex",
            strategy_options=_drop_none({
                "regex": regex,
                "caseSensitive": case_sensitive,
                "includeAnnotations": include_annotations,
                "start": start,
                "limit": limit,
            }),
            content=content,
        )

    @staticmethod
    def create_redactions_preset(
        preset: str,
        include_annotations: Optional[bool] = None,
        start: Optional[int] = None,
        limit: Optional[int] = None,
        content: Optional[Dict[str, Any]] = None
    ) -> CreateRedactionsAction:
        """Mark matches of a built-in pattern (e.g. "email-address") for redaction."""
        return CreateRedactionsAction(
            strategy="preset",
            strategy_options=_drop_none({
                "preset": preset,
                "includeAnnotations": include_annotations,
                "start": start,
                "limit": limit,
            }),
            content=content,
        )

    @staticmethod
    def apply_redactions() -> ApplyRedactionsAction:
        return ApplyRedactionsAction()
