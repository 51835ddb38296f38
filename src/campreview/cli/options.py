"""Command-line option resolution for the preview CLI."""

import argparse
import dataclasses
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import yaml

from campreview.config import Backend, PreviewConfig, SnapshotNaming
from campreview.utils.logging_config import setup_logger

logger = setup_logger(__name__)

_INT_PATTERN = re.compile(r"-?[0-9]+")


class OptionError(ValueError):
    """Invalid command-line input (bad integer, missing value, ...)."""


class _OptionParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors instead of exiting."""

    def error(self, message):
        raise OptionError(message)


def strict_int(text: str) -> int:
    """argparse type: plain decimal digits with an optional minus sign."""
    if not _INT_PATTERN.fullmatch(text):
        raise argparse.ArgumentTypeError(f"invalid integer: '{text}'")
    return int(text)


def positive_int(text: str) -> int:
    """argparse type: an integer strictly greater than zero."""
    value = strict_int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: '{text}'")
    return value


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the preview."""
    parser = _OptionParser(
        prog="campreview",
        add_help=False,
        allow_abbrev=False,
        description="Preview a camera, video file or stream URL with an FPS overlay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keys (preview window focused):
  q / ESC   quit
  s         save the current frame

Examples:
  campreview --cam 1 --width 1920 --height 1080
  campreview --source rtsp://camera.local/stream --backend ffmpeg
  campreview clip.mp4 --snapshot-dir shots
        """,
    )

    parser.add_argument(
        "positional_source",
        nargs="?",
        metavar="SOURCE",
        help="Video file path or URL (same as --source)",
    )
    parser.add_argument(
        "--cam",
        type=strict_int,
        help="Camera index (default: 0 when no source is given)",
    )
    parser.add_argument(
        "--source",
        type=str,
        help="Video file path or URL; takes precedence over --cam",
    )
    parser.add_argument(
        "--width",
        type=positive_int,
        help="Requested frame width (default: 1280)",
    )
    parser.add_argument(
        "--height",
        type=positive_int,
        help="Requested frame height (default: 720)",
    )
    parser.add_argument(
        "--backend",
        type=str,
        help=f"Capture backend: {'|'.join(Backend.names())} (default: any)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file; command-line flags override it",
    )
    parser.add_argument(
        "--snapshot-dir",
        type=Path,
        help="Directory for saved frames (default: current directory)",
    )
    parser.add_argument(
        "--fixed-name",
        action="store_true",
        help="Always save to frame.png instead of timestamped names",
    )
    parser.add_argument(
        "--max-frames",
        type=positive_int,
        help="Stop after this many frames",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="Show this help and exit",
    )

    return parser


def format_usage() -> str:
    return create_parser().format_help()


@dataclass
class ResolvedOptions:
    """Outcome of option resolution."""
    config: Optional[PreviewConfig] = None
    show_help: bool = False
    parse_failed: bool = False
    warnings: List[str] = field(default_factory=list)


def _failed(message: str) -> ResolvedOptions:
    logger.error(message)
    return ResolvedOptions(show_help=True, parse_failed=True)


def resolve_options(argv: Sequence[str]) -> ResolvedOptions:
    """
    Turn raw argument tokens into a preview configuration.

    Invalid values and missing flag values mark a parse failure and force
    the help text. Unknown flags, extra bare tokens and unknown backends are
    reported as warnings and otherwise ignored.

    Args:
        argv: Arguments without the program name

    Returns:
        ResolvedOptions; ``config`` is None when parsing failed
    """
    parser = create_parser()
    try:
        args, extras = parser.parse_known_args(list(argv))
    except OptionError as e:
        return _failed(f"Invalid arguments: {e}")

    resolved = ResolvedOptions(show_help=args.help)

    def warn(message: str) -> None:
        logger.warning(message)
        resolved.warnings.append(message)

    for token in extras:
        if token.startswith("-") and token != "-":
            warn(f"Unknown option ignored: {token}")
        else:
            warn(f"Unrecognized argument ignored: {token}")

    source = args.source
    if source is None:
        source = args.positional_source
    elif args.positional_source is not None:
        warn(f"Unrecognized argument ignored: {args.positional_source}")

    try:
        base = PreviewConfig.from_yaml(args.config) if args.config else PreviewConfig.from_env()
    except (FileNotFoundError, ValueError, TypeError, yaml.YAMLError) as e:
        return _failed(f"Invalid configuration: {e}")

    backend = base.backend
    if args.backend is not None:
        backend = Backend.from_name(args.backend)
        if backend is None:
            warn(f"Unknown backend '{args.backend}', falling back to 'any'")
            backend = Backend.ANY

    # Command-line selection replaces the config file's as a whole
    if source is not None or args.cam is not None:
        cam, origin = args.cam, "on the command line"
    else:
        cam, source, origin = base.cam, base.source, "in the configuration"
    if source and cam is not None:
        warn(f"Both a source and camera index {cam} were given {origin}; using source '{source}'")
        cam = None

    snapshot = base.snapshot
    if args.snapshot_dir is not None:
        snapshot = dataclasses.replace(snapshot, directory=args.snapshot_dir)
    if args.fixed_name:
        snapshot = dataclasses.replace(snapshot, naming=SnapshotNaming.FIXED)

    resolved.config = dataclasses.replace(
        base,
        cam=cam,
        source=source,
        width=args.width if args.width is not None else base.width,
        height=args.height if args.height is not None else base.height,
        backend=backend,
        max_frames=args.max_frames if args.max_frames is not None else base.max_frames,
        verbose=args.verbose or base.verbose,
        snapshot=snapshot,
    )
    return resolved


def log_config(config: PreviewConfig) -> None:
    """Log the resolved configuration, one setting per line."""
    logger.info("=" * 60)
    logger.info("campreview configuration")
    logger.info("=" * 60)
    for key, value in config.to_dict().items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                logger.info(f"  {key}.{sub_key}: {sub_value}")
        else:
            logger.info(f"  {key}: {value}")
