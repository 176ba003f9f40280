"""
Command line front end.

Usage::

    pixelscan list
    pixelscan apply photo.jpg edges.png -f 'median 3' -f sobel
    pixelscan apply photo.jpg glow.png -p glowing_edges

Ctrl+C cancels a running scan within one column, no output is written then.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
import sys
from contextlib import contextmanager

from pydantic import ValidationError

from . import __version__
from .config import Settings, configure_logging
from .errors import ImageIOError, PixelScanError
from .image import Image
from .filters import (
    Filter,
    FilterPipeline,
    Glass,
    CancellationToken,
    FILTER_ALIASES,
    PIPELINE_REGISTRY,
    create_pipeline,
    get_all_filters_info,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pixelscan',
        description='Apply cancellable per-pixel filters to images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                                    # Show filters and pipelines
  %(prog)s apply in.png out.png -f invert          # Single filter
  %(prog)s apply in.png out.png -f 'median 5' -f sobel
  %(prog)s apply in.png out.png -p glowing_edges   # Predefined pipeline
"""
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('list', help='List the available filters, aliases and pipelines')

    apply = commands.add_parser('apply', help='Apply filters to an image')
    apply.add_argument('input', help='Source image (PNG, JPEG or BMP)')
    apply.add_argument('output', help='Target file, the extension selects the format')
    source = apply.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--filter', '-f',
        action='append',
        dest='filters',
        metavar='FILTER',
        help="Filter in compact syntax, e.g. 'median 5', may be repeated"
    )
    source.add_argument(
        '--pipeline', '-p',
        help=f"Predefined pipeline ({', '.join(sorted(PIPELINE_REGISTRY))}) or 'a|b|c' chain"
    )
    apply.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Do not print progress'
    )
    return parser


def list_command(out=None) -> int:
    out = out or sys.stdout
    print('Filters:', file=out)
    for name, info in sorted(get_all_filters_info().items()):
        params = ', '.join(f'{k}={v!r}' for k, v in info.parameters.items())
        print(f'  {name.lower():<20} {info.summary}', file=out)
        if params:
            print(f'  {"":<20} ({params})', file=out)
    print('Aliases:', file=out)
    for alias, entry in sorted(FILTER_ALIASES.items()):
        if isinstance(entry, tuple):
            target = f"{entry[0].__name__}({', '.join(f'{k}={v!r}' for k, v in entry[1].items())})"
        else:
            target = entry.__name__
        print(f'  {alias:<20} -> {target}', file=out)
    print('Pipelines:', file=out)
    for name in sorted(PIPELINE_REGISTRY):
        print(f'  {name:<20} {create_pipeline(name).to_string()}', file=out)
    return EXIT_OK


def build_pipeline(args: argparse.Namespace, settings: Settings) -> FilterPipeline:
    """Create the pipeline described by the command line arguments."""
    if args.pipeline:
        if args.pipeline.lower() in PIPELINE_REGISTRY:
            pipeline = create_pipeline(args.pipeline)
        else:
            pipeline = FilterPipeline.parse(args.pipeline)
    else:
        pipeline = FilterPipeline.from_filters([Filter.parse(text) for text in args.filters])
    if settings.glass_seed is not None:
        for stage in pipeline:
            if isinstance(stage.filter, Glass) and stage.filter.seed is None:
                stage.filter = dataclasses.replace(stage.filter, seed=settings.glass_seed)
    return pipeline


@contextmanager
def cancel_on_interrupt(token: CancellationToken):
    """Turn SIGINT into a cancellation request while the block runs."""
    def handler(signum, frame):
        token.cancel()

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def apply_command(
    args: argparse.Namespace,
    settings: Settings,
    token: CancellationToken | None = None,
    err=None,
) -> int:
    """Load, filter and save one image.

    :returns: The process exit code
    """
    err = err or sys.stderr
    token = token if token is not None else CancellationToken()
    try:
        pipeline = build_pipeline(args, settings)
    except ValueError as e:
        print(f'pixelscan: {e}', file=err)
        return EXIT_USAGE
    try:
        image = Image.load(args.input)
    except ImageIOError as e:
        print(f'pixelscan: {e}', file=err)
        return EXIT_USAGE

    def show_progress(percent: int) -> None:
        print(f'\r{pipeline.name}: {percent:3d}%', end='', file=err, flush=True)

    logger.info("Applying %s (%d stages) to %s", pipeline.name, len(pipeline), image)
    result = pipeline.run(
        image,
        progress=None if args.quiet else show_progress,
        cancel=token,
    )
    if not args.quiet:
        print(file=err)
    if result.cancelled:
        print('pixelscan: cancelled, nothing written', file=err)
        return EXIT_CANCELLED
    try:
        result.image.save(args.output, quality=settings.jpeg_quality)
    except ImageIOError as e:
        print(f'pixelscan: {e}', file=err)
        return EXIT_USAGE
    logger.info("Wrote %s in %.1f ms", args.output, result.elapsed_ms)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as e:
        print(f'pixelscan: invalid environment settings\n{e}', file=sys.stderr)
        return EXIT_USAGE
    configure_logging(settings)

    if args.command == 'list':
        return list_command()
    token = CancellationToken()
    try:
        with cancel_on_interrupt(token):
            return apply_command(args, settings, token)
    except PixelScanError as e:
        print(f'pixelscan: {e}', file=sys.stderr)
        return EXIT_USAGE


if __name__ == '__main__':
    sys.exit(main())
