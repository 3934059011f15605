"""
Example script for running build workflows against the Nutrient DWS API.

Reads NUTRIENT_API_KEY from the environment or a .env file.
"""
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from nutrient_dws import BuildActions, NutrientClient, NutrientError
from nutrient_dws.core.logging import setup_logging


async def ocr_and_watermark(input_path: str, output_path: str = None):
    """
    OCR a scanned document, stamp a watermark and save the PDF.

    Args:
        input_path: Path to the input document
        output_path: Optional output path (default: same name with _processed.pdf)
    """
    source = Path(input_path)
    if not source.exists():
        print(f"Error: File not found: {input_path}")
        return

    target = Path(output_path) if output_path else source.with_name(f"{source.stem}_processed.pdf")

    async with NutrientClient() as client:
        workflow = (
            client.workflow()
            .add_file_part(source, actions=[BuildActions.ocr("english")])
            .apply_action(BuildActions.watermark_text(
                "CONFIDENTIAL",
                {"value": 100, "unit": "%"},
                {"value": 100, "unit": "%"},
                opacity=0.3,
                font_size=48,
            ))
            .output_pdf(optimize={"mrc_compression": True})
        )

        result = await workflow.execute(
            on_progress=lambda step, total: print(f"  Step {step}/{total}")
        )

    if not result.success:
        for error in result.errors:
            print(f"✗ Step {error.step}: {error.error}")
        return

    target.write_bytes(result.output.buffer)
    print(f"✓ Success! PDF saved to: {target}")
    print(f"  Size: {len(result.output.buffer)} bytes")


async def estimate(input_path: str):
    """Print the credit cost of an OCR build without running it."""
    async with NutrientClient() as client:
        result = await (
            client.workflow()
            .add_file_part(input_path, actions=[BuildActions.ocr("english")])
            .dry_run()
        )

    if result.success:
        print(f"Estimated cost: {result.analysis.cost}")
        print(f"Required features: {result.analysis.required_features}")
    else:
        print(f"✗ Dry run failed: {result.errors[0].error}")


async def extract_text(input_path: str):
    """Print the plain text of a document."""
    try:
        async with NutrientClient() as client:
            output = await client.extract_text(input_path)
    except NutrientError as e:
        print(f"✗ {e}")
        return

    for page in output.data.get("pages", []):
        print(page.get("plainText", ""))


if __name__ == "__main__":
    load_dotenv()
    setup_logging()

    if len(sys.argv) < 2:
        print("Usage:")
        print("  python example_workflow.py <file> [output_file]")
        print("  python example_workflow.py --estimate <file>")
        print("  python example_workflow.py --text <file>")
        sys.exit(1)

    if sys.argv[1] == "--estimate":
        asyncio.run(estimate(sys.argv[2]))
    elif sys.argv[1] == "--text":
        asyncio.run(extract_text(sys.argv[2]))
    else:
        asyncio.run(ocr_and_watermark(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
