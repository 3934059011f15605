"""
Unit tests for WorkflowBuilder graph construction.

Covers stage ordering, asset key allocation, deferred action resolution and
output directive handling. Execution is tested in test_workflow_execution.py.
"""
import unittest

from nutrient_dws.core.error_handling import NutrientError, ValidationError
from nutrient_dws.models.build_models import (
    ApplyXfdfAction,
    DocumentPart,
    FilePart,
    HtmlPart,
    ImageOutput,
    ImageWatermarkAction,
    NewPagePart,
    OcrAction,
    PdfOutput,
    RotateAction,
)
from nutrient_dws.models.file_inputs import UrlInput
from nutrient_dws.models.workflow_models import NutrientClientOptions
from nutrient_dws.services.build_actions import ActionWithFileInput, BuildActions
from nutrient_dws.services.build_outputs import BuildOutputs
from nutrient_dws.workflows.workflow_builder import WorkflowBuilder
from nutrient_dws.workflows.workflow_types import WorkflowStage


def make_builder() -> WorkflowBuilder:
    return WorkflowBuilder(NutrientClientOptions(api_key="test-key"))


class TestWorkflowBuilderParts(unittest.TestCase):
    """Test cases for adding parts."""

    def setUp(self):
        self.builder = make_builder()

    def test_initial_state(self):
        """Test a new builder is empty and in the initial stage."""
        self.assertEqual(self.builder.stage, WorkflowStage.INITIAL)
        self.assertEqual(self.builder.build_instructions.parts, [])
        self.assertEqual(len(self.builder.assets), 0)
        self.assertFalse(self.builder.is_executed)

    def test_add_file_part_local(self):
        """Test a local file is registered and referenced by key."""
        result = self.builder.add_file_part("doc.pdf")

        self.assertIs(result, self.builder)
        self.assertEqual(self.builder.stage, WorkflowStage.PARTS)
        self.assertEqual(self.builder.instructions, {"parts": [{"file": "asset_0"}]})
        self.assertEqual(self.builder.assets["asset_0"], "doc.pdf")

    def test_add_file_part_url(self):
        """Test a URL is embedded and not registered."""
        self.builder.add_file_part("https://example.com/doc.pdf")
        self.builder.add_file_part(UrlInput("https://example.com/other.pdf"))

        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.instructions["parts"], [
            {"file": {"url": "https://example.com/doc.pdf"}},
            {"file": {"url": "https://example.com/other.pdf"}},
        ])

    def test_add_file_part_options(self):
        """Test part options are serialized."""
        self.builder.add_file_part("doc.pdf", {
            "password": "secret",
            "pages": {"start": 0, "end": 2},
            "layout": {"orientation": "landscape", "size": "A4"},
        })

        part = self.builder.instructions["parts"][0]
        self.assertEqual(part["password"], "secret")
        self.assertEqual(part["pages"], {"start": 0, "end": 2})
        self.assertEqual(part["layout"], {"orientation": "landscape", "size": "A4"})

    def test_add_file_part_invalid_options(self):
        """Test unknown options raise ValidationError before registering."""
        with self.assertRaises(ValidationError):
            self.builder.add_file_part("doc.pdf", {"pagez": {"start": 0}})

        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.build_instructions.parts, [])

    def test_add_file_part_invalid_input(self):
        """Test invalid file inputs are rejected."""
        with self.assertRaises(ValidationError):
            self.builder.add_file_part(12345)

    def test_part_actions(self):
        """Test part level actions are attached to the part."""
        self.builder.add_file_part("doc.pdf", actions=[
            BuildActions.ocr("english"),
            BuildActions.rotate(90),
        ])

        part = self.builder.build_instructions.parts[0]
        self.assertIsInstance(part, FilePart)
        self.assertIsInstance(part.actions[0], OcrAction)
        self.assertIsInstance(part.actions[1], RotateAction)
        self.assertEqual(
            self.builder.instructions["parts"][0]["actions"],
            [{"type": "ocr", "language": "english"}, {"type": "rotate", "rotateBy": 90}]
        )

    def test_empty_part_actions_omitted(self):
        """Test an empty action list is not serialized."""
        self.builder.add_file_part("doc.pdf", actions=[])

        self.assertNotIn("actions", self.builder.instructions["parts"][0])

    def test_dict_actions_are_validated(self):
        """Test plain dict actions are coerced into models."""
        self.builder.add_file_part("doc.pdf", actions=[{"type": "rotate", "rotateBy": 180}])

        self.assertIsInstance(self.builder.build_instructions.parts[0].actions[0], RotateAction)

        with self.assertRaises(ValidationError):
            self.builder.add_file_part("doc.pdf", actions=[{"type": "rotate", "rotateBy": 45}])

    def test_add_html_part_with_assets(self):
        """Test HTML and its assets are registered in order."""
        self.builder.add_html_part("index.html", assets=["style.css", b"\x89PNG"])

        part = self.builder.build_instructions.parts[0]
        self.assertIsInstance(part, HtmlPart)
        self.assertEqual(part.html, "asset_0")
        self.assertEqual(part.assets, ["asset_1", "asset_2"])
        self.assertEqual(len(self.builder.assets), 3)

    def test_add_html_part_rejects_url_asset(self):
        """Test a URL asset raises and registers nothing."""
        with self.assertRaises(ValidationError) as context:
            self.builder.add_html_part(
                "index.html",
                assets=["style.css", "https://example.com/logo.png"]
            )

        self.assertIn("Assets file input cannot be an URL", str(context.exception))
        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.build_instructions.parts, [])

    def test_add_new_page(self):
        """Test blank pages are serialized with wire names."""
        self.builder.add_new_page({"page_count": 2, "layout": {"orientation": "portrait"}})

        self.assertIsInstance(self.builder.build_instructions.parts[0], NewPagePart)
        self.assertEqual(self.builder.instructions["parts"][0], {
            "page": "new",
            "pageCount": 2,
            "layout": {"orientation": "portrait"},
        })

    def test_add_new_page_invalid_count(self):
        """Test page_count must be positive."""
        with self.assertRaises(ValidationError):
            self.builder.add_new_page({"page_count": 0})

    def test_add_document_part(self):
        """Test stored documents are referenced by id and layer."""
        self.builder.add_document_part("doc-123", {"layer": "review", "password": "pw"})

        part = self.builder.build_instructions.parts[0]
        self.assertIsInstance(part, DocumentPart)
        self.assertEqual(self.builder.instructions["parts"][0], {
            "document": {"id": "doc-123", "layer": "review"},
            "password": "pw",
        })
        self.assertEqual(len(self.builder.assets), 0)

    def test_asset_keys_across_parts_and_actions(self):
        """Test keys increase across parts, part actions and document actions."""
        self.builder.add_file_part("a.pdf")
        self.builder.add_file_part("b.pdf", actions=[BuildActions.apply_xfdf("notes.xfdf")])
        self.builder.apply_action(BuildActions.watermark_image(
            "logo.png", {"value": 10}, {"value": 10}
        ))

        self.assertEqual(
            [key for key, _ in self.builder.assets.items()],
            ["asset_0", "asset_1", "asset_2", "asset_3"]
        )
        instructions = self.builder.instructions
        self.assertEqual(instructions["parts"][1]["file"], "asset_1")
        self.assertEqual(instructions["parts"][1]["actions"][0]["file"], "asset_2")
        self.assertEqual(instructions["actions"][0]["image"], "asset_3")

    def test_deferred_action_with_url(self):
        """Test deferred actions with a URL embed it without registering."""
        self.builder.add_file_part("a.pdf", actions=[
            BuildActions.apply_xfdf("https://example.com/notes.xfdf", ignore_page_rotation=True)
        ])

        action = self.builder.build_instructions.parts[0].actions[0]
        self.assertIsInstance(action, ApplyXfdfAction)
        self.assertEqual(len(self.builder.assets), 1)
        self.assertEqual(self.builder.instructions["parts"][0]["actions"][0], {
            "type": "applyXfdf",
            "file": {"url": "https://example.com/notes.xfdf"},
            "ignorePageRotation": True,
        })


class TestWorkflowBuilderStages(unittest.TestCase):
    """Test cases for stage ordering."""

    def setUp(self):
        self.builder = make_builder()

    def test_actions_require_parts(self):
        """Test actions cannot be applied before any part."""
        with self.assertRaises(ValidationError):
            self.builder.apply_action(BuildActions.flatten())

    def test_output_requires_parts(self):
        """Test an output cannot be set before any part."""
        with self.assertRaises(ValidationError):
            self.builder.output_pdf()

    def test_parts_after_actions_rejected(self):
        """Test parts cannot be added once actions were applied."""
        self.builder.add_file_part("a.pdf").apply_action(BuildActions.flatten())

        with self.assertRaises(ValidationError):
            self.builder.add_file_part("b.pdf")

    def test_actions_after_output_rejected(self):
        """Test actions cannot be applied once the output is set."""
        self.builder.add_file_part("a.pdf").output_pdf()

        with self.assertRaises(ValidationError):
            self.builder.apply_action(BuildActions.flatten())
        with self.assertRaises(ValidationError):
            self.builder.add_new_page()

    def test_stage_transitions(self):
        """Test the stage advances with each kind of call."""
        self.builder.add_file_part("a.pdf")
        self.assertEqual(self.builder.stage, WorkflowStage.PARTS)

        self.builder.add_new_page()
        self.assertEqual(self.builder.stage, WorkflowStage.PARTS)

        self.builder.apply_actions([BuildActions.ocr("english")])
        self.assertEqual(self.builder.stage, WorkflowStage.ACTIONS)

        self.builder.apply_action(BuildActions.flatten())
        self.assertEqual(self.builder.stage, WorkflowStage.ACTIONS)

        self.builder.output_pdf()
        self.assertEqual(self.builder.stage, WorkflowStage.OUTPUT)

    def test_document_actions_accumulate(self):
        """Test document actions keep their order across calls."""
        self.builder.add_file_part("a.pdf")
        self.builder.apply_actions([BuildActions.ocr("english"), BuildActions.rotate(90)])
        self.builder.apply_action(BuildActions.flatten())

        types = [action["type"] for action in self.builder.instructions["actions"]]
        self.assertEqual(types, ["ocr", "rotate", "flatten"])


class TestWorkflowBuilderFailedCalls(unittest.TestCase):
    """Test cases for calls that raise while building a part or action."""

    def setUp(self):
        self.builder = make_builder()

    @staticmethod
    def failing_deferred_action() -> ActionWithFileInput:
        return ActionWithFileInput(
            file_input=b"\x89PNG",
            create_action=lambda handle: ImageWatermarkAction(
                image=handle, width={"value": 10}, height={"value": 10}, opacity=5
            ),
        )

    def test_invalid_html_asset(self):
        """Test an invalid asset is rejected before the HTML is registered."""
        with self.assertRaises(ValidationError) as context:
            self.builder.add_html_part(b"<html/>", assets=[b"css", 123])

        self.assertIn("Invalid HTML asset", str(context.exception))
        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.build_instructions.parts, [])

    def test_invalid_part_action(self):
        """Test the part file is unregistered when one of its actions is invalid."""
        with self.assertRaises(ValidationError):
            self.builder.add_file_part("draft.pdf", actions=[{"type": "bogus"}])

        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.stage, WorkflowStage.INITIAL)

    def test_failing_deferred_factory_on_part(self):
        """Test files registered for the part and earlier actions are dropped."""
        with self.assertRaises(ValidationError):
            self.builder.add_html_part(
                "index.html",
                assets=["style.css"],
                actions=[BuildActions.apply_instant_json(b"{}"), self.failing_deferred_action()],
            )

        self.assertEqual(len(self.builder.assets), 0)
        self.assertEqual(self.builder.build_instructions.parts, [])

    def test_failing_deferred_factory_on_document(self):
        """Test a failing document action keeps only the part's asset."""
        self.builder.add_file_part("a.pdf")

        with self.assertRaises(NutrientError) as context:
            self.builder.apply_action(self.failing_deferred_action())

        self.assertIsInstance(context.exception, ValidationError)
        self.assertEqual(context.exception.message, "Invalid action")
        self.assertEqual(list(key for key, _ in self.builder.assets.items()), ["asset_0"])
        self.assertIsNone(self.builder.build_instructions.actions)
        self.assertEqual(self.builder.stage, WorkflowStage.PARTS)

    def test_keys_not_reused_after_failure(self):
        """Test keys handed out by a failed call are skipped afterwards."""
        with self.assertRaises(ValidationError):
            self.builder.add_file_part("draft.pdf", actions=[{"type": "bogus"}])

        self.builder.add_file_part("final.pdf")

        self.assertEqual(self.builder.instructions, {"parts": [{"file": "asset_1"}]})
        self.assertEqual(len(self.builder.assets), 1)

    def test_output_image_checks_stage_first(self):
        """Test a sizeless image output on an empty builder reports the stage."""
        with self.assertRaises(ValidationError) as context:
            self.builder.output_image("png")

        self.assertIn("output_image()", str(context.exception))
        self.assertNotIn("dpi, height, width", str(context.exception))


class TestWorkflowBuilderOutput(unittest.TestCase):
    """Test cases for output directives."""

    def setUp(self):
        self.builder = make_builder().add_file_part("a.pdf")

    def test_last_output_wins(self):
        """Test a second output setter replaces the first."""
        self.builder.output_pdf().output_markdown()

        self.assertEqual(self.builder.instructions["output"], {"type": "markdown"})

    def test_output_pdf_options(self):
        """Test PDF options use the service field names."""
        self.builder.output_pdf(
            user_password="user",
            owner_password="owner",
            user_permissions=["printing"],
            optimize={"mrc_compression": True},
        )

        self.assertEqual(self.builder.instructions["output"], {
            "type": "pdf",
            "user_password": "user",
            "owner_password": "owner",
            "user_permissions": ["printing"],
            "optimize": {"mrcCompression": True},
        })

    def test_output_pdf_a(self):
        self.builder.output_pdf_a(conformance="pdfa-2b")

        self.assertEqual(self.builder.instructions["output"], {"type": "pdfa", "conformance": "pdfa-2b"})

    def test_output_pdf_ua(self):
        self.builder.output_pdf_ua()

        self.assertEqual(self.builder.instructions["output"], {"type": "pdfua"})

    def test_output_image_requires_size(self):
        """Test image output needs dpi, width or height."""
        with self.assertRaises(ValidationError) as context:
            self.builder.output_image("png")

        self.assertIn("dpi, height, width", str(context.exception))
        self.assertIsNone(self.builder.build_instructions.output)

    def test_output_image(self):
        self.builder.output_image("jpeg", dpi=150, pages={"start": 0, "end": 0})

        output = self.builder.build_instructions.output
        self.assertIsInstance(output, ImageOutput)
        self.assertEqual(self.builder.instructions["output"], {
            "type": "image",
            "format": "jpeg",
            "dpi": 150,
            "pages": {"start": 0, "end": 0},
        })

    def test_output_office(self):
        self.builder.output_office("docx")

        self.assertEqual(self.builder.instructions["output"], {"type": "docx"})

    def test_output_office_invalid(self):
        with self.assertRaises(ValidationError):
            self.builder.output_office("odt")

    def test_output_html(self):
        self.builder.output_html("reflow")

        self.assertEqual(self.builder.instructions["output"], {"type": "html", "layout": "reflow"})

    def test_output_json(self):
        self.builder.output_json(plain_text=True, tables=True)

        self.assertEqual(self.builder.instructions["output"], {
            "type": "json-content",
            "plainText": True,
            "tables": True,
        })

    def test_output_accepts_model_and_dict(self):
        """Test output() takes a factory result or a plain dict."""
        self.builder.output(BuildOutputs.pdf())
        self.assertIsInstance(self.builder.build_instructions.output, PdfOutput)

        self.builder.output({"type": "xlsx"})
        self.assertEqual(self.builder.instructions["output"], {"type": "xlsx"})

        with self.assertRaises(ValidationError):
            self.builder.output({"type": "tiff"})


if __name__ == "__main__":
    unittest.main()
