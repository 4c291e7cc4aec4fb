#!/usr/bin/env python3
"""
Transform one photo with the external tool and stream its console output.

Usage:
    python3 -m photojob.run_job photo.jpg
    python3 -m photojob.run_job photo.jpg --output-dir out/ --id 42
    python3 -m photojob.run_job photo.jpg --set gpu_id=0 --set preset=fast
    python3 -m photojob.run_job photo.jpg --executable /opt/tool/bin/cli --json-logs

Tool defaults come from ``PHOTOJOB_*`` environment variables (see settings.py).
Ctrl+C asks the running tool to stop; the job then ends as failed.
"""
import argparse
import asyncio
import logging
import signal
import sys
import uuid
from typing import Any, Dict, List, Optional

from photojob.jobs import CliTransformTool, PhotoJob, PhotoJobError
from photojob.photo import Photo
from photojob.settings import ToolSettings
from photojob.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def parse_preferences(items: Optional[List[str]]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs; ``true``/``false`` become booleans."""
    prefs: Dict[str, Any] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {item!r}")
        lowered = value.lower()
        if lowered in ("true", "false"):
            prefs[key] = lowered == "true"
        else:
            prefs[key] = value
    return prefs


async def run(job: PhotoJob, quiet: bool = False) -> int:
    """Run *job* to completion, printing console lines as they arrive."""
    loop = asyncio.get_running_loop()
    task = job.start()
    handles_sigint = True
    try:
        loop.add_signal_handler(signal.SIGINT, job.cancel)
    except NotImplementedError:
        handles_sigint = False
        logger.debug("SIGINT handler not supported on this platform")

    try:
        async for event in job.subscribe_events():
            if event.get("event") != "line" or quiet:
                continue
            if event["is_error"]:
                print(event["text"], file=sys.stderr)
            else:
                print(event["text"])
        await task
    except PhotoJobError as exc:
        print(f"\nERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    print(f"\n{'='*60}")
    print(f"Job {job.get_id()} {job.state.value} in {job.elapsed:.2f}s")
    print(f"Output: {job.get_file().path} ({job.get_file().size} bytes)")
    print(f"{'='*60}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command-line entry point."""
    parser = argparse.ArgumentParser(description="Transform a photo with the external tool")
    parser.add_argument("photo", help="Path to the source photo")
    parser.add_argument("--output-dir", help="Destination folder (default: next to the photo)")
    parser.add_argument("--id", dest="job_id", help="Job id (default: random)")
    parser.add_argument("--executable", help="Override PHOTOJOB_EXECUTABLE")
    parser.add_argument(
        "--set",
        action="append",
        metavar="KEY=VALUE",
        help="Transformation preference forwarded as --KEY VALUE (repeatable)",
    )
    parser.add_argument("--log-level", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--quiet", action="store_true", help="Do not echo tool output")
    args = parser.parse_args(argv)

    settings = ToolSettings()
    configure_logging(
        level=args.log_level or settings.log_level,
        json_logs=args.json_logs or settings.json_logs,
    )

    try:
        preferences = parse_preferences(args.set)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    tool = CliTransformTool.from_settings(settings)
    if args.executable:
        tool.executable = args.executable

    photo = Photo.from_path(args.photo, folder=args.output_dir, preferences=preferences)
    job = PhotoJob(args.job_id or uuid.uuid4().hex[:12], photo, tool=tool)
    return asyncio.run(run(job, quiet=args.quiet))


if __name__ == "__main__":
    sys.exit(main())
