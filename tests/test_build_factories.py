"""
Unit tests for BuildActions, BuildOutputs and the build instruction models.
"""
import unittest

from pydantic import ValidationError

from nutrient_dws.models.build_models import (
    ApplyRedactionsAction,
    BuildInstructions,
    CreateRedactionsAction,
    FilePart,
    ImageOutput,
    JsonContentOutput,
    NewPagePart,
    PdfOutput,
    RemoteFileHandle,
    TextWatermarkAction,
    build_output_adapter,
)
from nutrient_dws.services.build_actions import ActionWithFileInput, BuildActions
from nutrient_dws.services.build_outputs import BuildOutputs


class TestBuildActions(unittest.TestCase):
    """Test cases for the action factories."""

    def test_ocr(self):
        self.assertEqual(BuildActions.ocr(["english", "german"]).to_wire(), {
            "type": "ocr",
            "language": ["english", "german"],
        })

    def test_rotate(self):
        self.assertEqual(BuildActions.rotate(270).to_wire(), {"type": "rotate", "rotateBy": 270})

    def test_rotate_invalid_angle(self):
        with self.assertRaises(ValidationError):
            BuildActions.rotate(45)

    def test_watermark_text(self):
        action = BuildActions.watermark_text(
            "CONFIDENTIAL",
            {"value": 100, "unit": "%"},
            {"value": 50, "unit": "%"},
            opacity=0.5,
            font_size=24,
            font_color="#ff0000",
        )

        self.assertIsInstance(action, TextWatermarkAction)
        self.assertEqual(action.to_wire(), {
            "type": "watermark",
            "text": "CONFIDENTIAL",
            "width": {"value": 100.0, "unit": "%"},
            "height": {"value": 50.0, "unit": "%"},
            "opacity": 0.5,
            "fontSize": 24,
            "fontColor": "#ff0000",
        })

    def test_watermark_opacity_range(self):
        with self.assertRaises(ValidationError):
            BuildActions.watermark_text("X", {"value": 1}, {"value": 1}, opacity=1.5)

    def test_deferred_factories(self):
        """Test file-based actions are deferred until a handle exists."""
        for action in (
            BuildActions.watermark_image("logo.png", {"value": 10}, {"value": 10}),
            BuildActions.apply_instant_json("annotations.json"),
            BuildActions.apply_xfdf("annotations.xfdf"),
        ):
            with self.subTest(action=action):
                self.assertIsInstance(action, ActionWithFileInput)

    def test_deferred_options_validated_on_call(self):
        """Test deferred factories reject bad options before any file is registered."""
        with self.assertRaises(ValidationError):
            BuildActions.watermark_image(b"\x89PNG", {"value": 10}, {"value": 10}, opacity=5)
        with self.assertRaises(ValidationError):
            BuildActions.apply_xfdf("notes.xfdf", rich_text_enabled="sometimes")

    def test_deferred_create_action(self):
        action = BuildActions.apply_xfdf("notes.xfdf", rich_text_enabled=True)

        concrete = action.create_action(RemoteFileHandle(url="https://example.com/notes.xfdf"))

        self.assertEqual(action.file_input, "notes.xfdf")
        self.assertEqual(concrete.to_wire(), {
            "type": "applyXfdf",
            "file": {"url": "https://example.com/notes.xfdf"},
            "richTextEnabled": True,
        })

    def test_flatten(self):
        self.assertEqual(BuildActions.flatten().to_wire(), {"type": "flatten"})
        self.assertEqual(
            BuildActions.flatten(["a1", 2]).to_wire(),
            {"type": "flatten", "annotationIds": ["a1", 2]}
        )

    def test_create_redactions(self):
        text = BuildActions.create_redactions_text("secret", case_sensitive=True)
        regex = BuildActions.create_redactions_regex(r"\d{4}")
        preset = BuildActions.create_redactions_preset("email-address", limit=10)

        self.assertIsInstance(text, CreateRedactionsAction)
        self.assertEqual(text.to_wire(), {
            "type": "createRedactions",
            "strategy": "text",
            "strategyOptions": {"text": "secret", "caseSensitive": True},
        })
        self.assertEqual(regex.to_wire()["strategyOptions"], {"regex": r"\d{4}"})
        self.assertEqual(preset.to_wire()["strategyOptions"], {"preset": "email-address", "limit": 10})

    def test_apply_redactions(self):
        action = BuildActions.apply_redactions()

        self.assertIsInstance(action, ApplyRedactionsAction)
        self.assertEqual(action.to_wire(), {"type": "applyRedactions"})


class TestBuildOutputs(unittest.TestCase):
    """Test cases for the output factories and mime type mapping."""

    def test_pdf_family(self):
        self.assertEqual(BuildOutputs.pdf().to_wire(), {"type": "pdf"})
        self.assertEqual(
            BuildOutputs.pdfa(conformance="pdfa-1b", vectorization=True).to_wire(),
            {"type": "pdfa", "conformance": "pdfa-1b", "vectorization": True}
        )
        self.assertEqual(BuildOutputs.pdfua().to_wire(), {"type": "pdfua"})

    def test_pdf_metadata_and_labels(self):
        output = BuildOutputs.pdf(
            metadata={"title": "Report", "author": "Finance"},
            labels=[{"pages": {"start": 0, "end": 0}, "label": "Cover"}],
        )

        self.assertEqual(output.to_wire(), {
            "type": "pdf",
            "metadata": {"title": "Report", "author": "Finance"},
            "labels": [{"pages": {"start": 0, "end": 0}, "label": "Cover"}],
        })

    def test_image(self):
        output = BuildOutputs.image("webp", width=800)

        self.assertIsInstance(output, ImageOutput)
        self.assertEqual(output.to_wire(), {"type": "image", "format": "webp", "width": 800.0})

    def test_json_content(self):
        output = BuildOutputs.json_content(structured_text=True, key_value_pairs=True, language="english")

        self.assertIsInstance(output, JsonContentOutput)
        self.assertEqual(output.to_wire(), {
            "type": "json-content",
            "structuredText": True,
            "keyValuePairs": True,
            "language": "english",
        })

    def test_office_html_markdown(self):
        self.assertEqual(BuildOutputs.office("pptx").to_wire(), {"type": "pptx"})
        self.assertEqual(BuildOutputs.html("page").to_wire(), {"type": "html", "layout": "page"})
        self.assertEqual(BuildOutputs.markdown().to_wire(), {"type": "markdown"})

    def test_mime_types(self):
        cases = [
            (BuildOutputs.pdf(), None, ("application/pdf", "output.pdf")),
            (BuildOutputs.pdfa(), None, ("application/pdf", "output.pdf")),
            (BuildOutputs.image("jpg", dpi=72), None, ("image/jpeg", "output.jpg")),
            (BuildOutputs.image("png", dpi=72), None, ("image/png", "output.png")),
            (BuildOutputs.image(dpi=72), "image/webp", ("image/webp", "output.webp")),
            (BuildOutputs.image(dpi=72), "image/jpeg; charset=binary", ("image/jpeg", "output.jpg")),
            (BuildOutputs.image(dpi=72), None, ("image/png", "output.png")),
            (
                BuildOutputs.office("docx"),
                None,
                ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "output.docx"),
            ),
            (BuildOutputs.html(), None, ("text/html", "output.html")),
            (BuildOutputs.markdown(), None, ("text/markdown", "output.md")),
            (BuildOutputs.json_content(), None, ("application/octet-stream", "output")),
        ]
        for output, content_type, expected in cases:
            with self.subTest(output=output.type, content_type=content_type):
                self.assertEqual(BuildOutputs.get_mime_type_for_output(output, content_type), expected)


class TestBuildModels(unittest.TestCase):
    """Test cases for the instruction graph models."""

    def test_unknown_fields_rejected(self):
        with self.assertRaises(ValidationError):
            FilePart(file="asset_0", unknown=True)

    def test_output_discriminator(self):
        output = build_output_adapter.validate_python({"type": "pdf", "user_password": "pw"})

        self.assertIsInstance(output, PdfOutput)
        self.assertEqual(output.user_password, "pw")

    def test_instructions_wire_format(self):
        instructions = BuildInstructions(
            parts=[
                FilePart(file="asset_0"),
                NewPagePart(page_count=1),
            ],
            actions=[BuildActions.rotate(90)],
            output=BuildOutputs.pdf(),
        )

        self.assertEqual(instructions.to_wire(), {
            "parts": [{"file": "asset_0"}, {"page": "new", "pageCount": 1}],
            "actions": [{"type": "rotate", "rotateBy": 90}],
            "output": {"type": "pdf"},
        })

    def test_empty_instructions(self):
        self.assertEqual(BuildInstructions().to_wire(), {"parts": []})


if __name__ == "__main__":
    unittest.main()
