"""
Command-line interface for rendering .eml files to JPEG images.

Runs the same pipeline as the API against a private browser session.

Usage:
    # Single file (writes input.jpg next to the input)
    eml-snapshot input.eml

    # Explicit output path, crop at 4000px, no network access
    eml-snapshot input.eml -o out.jpg --max-height 4000 --offline

    # Directory batch processing
    eml-snapshot emails/ --output-dir images/
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from eml_snapshot.config import settings
from eml_snapshot.errors import EmailRenderError
from eml_snapshot.logging_config import setup_logging
from eml_snapshot.pipeline import EmailRenderPipeline, build_render_config
from eml_snapshot.rendering.browser import BrowserSession

logger = structlog.get_logger(__name__)


def collect_inputs(input_path: Path) -> List[Path]:
    """
    Resolve the input argument to a list of .eml files.
    """
    if input_path.is_file():
        return [input_path]
    return sorted(p for p in input_path.glob("*.eml") if p.is_file())


def output_path_for(eml_path: Path, output: Optional[Path], output_dir: Optional[Path]) -> Path:
    if output is not None:
        return output
    directory = output_dir if output_dir is not None else eml_path.parent
    return directory / f"{eml_path.stem}.jpg"


async def render_files(
    inputs: List[Path],
    output: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    max_height: Optional[int] = None,
    offline: Optional[bool] = None,
) -> List[Dict]:
    """
    Render every input file and write one JPEG per message.

    A failing message is reported in its result entry and does not stop the
    batch.

    Returns:
        One summary dict per input file
    """
    config = build_render_config(settings, max_capture_height=max_height, offline_mode=offline)
    session = BrowserSession(
        max_concurrent_pages=1,
        queue_timeout_seconds=None,
        launch_timeout_ms=settings.browser_launch_timeout_ms,
    )
    pipeline = EmailRenderPipeline(session, config)

    await session.start()
    results = []
    try:
        for eml_path in inputs:
            target = output_path_for(eml_path, output, output_dir)
            try:
                result = await pipeline.convert(eml_path.read_bytes())
            except EmailRenderError as e:
                results.append(
                    {"input": str(eml_path), "success": False, "error": e.error_code, "detail": e.message}
                )
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(result.capture.image_bytes)
            results.append(
                {
                    "input": str(eml_path),
                    "output": str(target),
                    "success": True,
                    "subject": result.metadata.subject,
                    "from": result.metadata.sender,
                    "message_id": result.metadata.message_id,
                    "height_truncated": result.capture.height_truncated,
                    "actual_height": result.capture.actual_height,
                    "captured_height": result.capture.captured_height,
                }
            )
    finally:
        await session.shutdown()

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eml-snapshot",
        description="Render .eml email messages to JPEG images",
    )
    parser.add_argument("input", type=str, help="Path to .eml file or directory of .eml files")
    parser.add_argument("--output", "-o", type=str, default=None, help="Output JPEG path (single file only)")
    parser.add_argument(
        "--output-dir", type=str, default=None, help="Directory for output images (default: next to input)"
    )
    parser.add_argument(
        "--max-height",
        type=int,
        default=None,
        help=f"Crop captures taller than this many pixels (default: {settings.max_capture_height})",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        default=None,
        help="Block all external network requests while rendering",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else None, json_output=False)

    if args.max_height is not None and args.max_height < 1:
        parser.error("--max-height must be a positive integer")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Path not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    inputs = collect_inputs(input_path)
    if not inputs:
        print(f"Error: No .eml files found in {input_path}", file=sys.stderr)
        sys.exit(1)
    if args.output and len(inputs) > 1:
        parser.error("--output can only be used with a single input file")

    try:
        results = asyncio.run(
            render_files(
                inputs,
                output=Path(args.output) if args.output else None,
                output_dir=Path(args.output_dir) if args.output_dir else None,
                max_height=args.max_height,
                offline=args.offline,
            )
        )
    except EmailRenderError as e:
        logger.error("cli_failed", error=e.message, error_code=e.error_code)
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    for result in results:
        print(json.dumps(result, ensure_ascii=False), file=sys.stderr)

    if not all(r["success"] for r in results):
        sys.exit(2)


if __name__ == "__main__":
    main()
