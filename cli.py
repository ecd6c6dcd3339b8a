#!/usr/bin/env python3
"""
Darkroom Command Line Interface

Renders edit settings onto images: single renders, mask overlays and
batch runs over a directory.
"""

import sys
import time
import click
import logging
from pathlib import Path
from typing import Optional

import yaml
from tqdm import tqdm

from darkroom.config import load_config, load_edit_settings
from darkroom.io.images import load_image, save_image
from darkroom.preview import PreviewConfig, PreviewProcessor
from darkroom.processing.lut import Lut
from darkroom.utils.logging import ProcessingStats, setup_console_logging


logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tif', '.tiff', '.webp', '.bmp'}

# Errors reported as a failed command instead of a traceback
CLI_ERRORS = (OSError, ValueError, KeyError, yaml.YAMLError)


def _build_processor(config: dict, max_size: Optional[int], workers: Optional[int]) -> PreviewProcessor:
    preview_config = PreviewConfig.from_config(config)
    # Full resolution unless asked otherwise
    preview_config.max_dimension = max_size
    if workers:
        preview_config.workers = workers
    return PreviewProcessor(preview_config)


def _load_lut(lut_path: Optional[str]) -> Optional[Lut]:
    return Lut.load(lut_path) if lut_path else None


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    Darkroom - render photo edits

    Applies tone, color mixer, local masks and LUT grading described in an
    edit settings file (YAML or JSON) to images.
    """
    if ctx.obj is None:
        ctx.obj = {}

    app_config = load_config(config)
    log_config = app_config.get('logging', {})

    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    else:
        level = log_config.get('level', 'INFO')
    setup_console_logging(level, color=log_config.get('color', True))

    ctx.obj['config'] = app_config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_path', type=click.Path(dir_okay=False))
@click.option('--settings', '-s', 'settings_path', type=click.Path(exists=True, dir_okay=False),
              help='Edit settings file (YAML or JSON)')
@click.option('--lut', 'lut_path', type=click.Path(exists=True, dir_okay=False),
              help='LUT lattice saved as .npy')
@click.option('--max-size', type=int, default=None, help='Downscale the longest side to this')
@click.option('--workers', '-w', type=int, default=None, help='Render threads')
@click.pass_context
def render(ctx, input_path: str, output_path: str, settings_path: Optional[str],
           lut_path: Optional[str], max_size: Optional[int], workers: Optional[int]):
    """
    Render INPUT_PATH with an edit settings file and write OUTPUT_PATH.
    """
    from darkroom.processing.local_adjustments import EditSettings

    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    try:
        settings = load_edit_settings(settings_path) if settings_path else EditSettings()
        processor = _build_processor(config, max_size, workers)
        image = load_image(input_path)
        result = processor.render(image, settings, _load_lut(lut_path))
        save_image(result, output_path, quality=config.get('output', {}).get('quality'))
    except CLI_ERRORS as e:
        logger.error(f"Render failed: {e}")
        click.echo(f"❌ Render failed: {e}", err=True)
        sys.exit(1)

    if not quiet:
        click.echo(f"✅ Rendered {input_path} -> {output_path} "
                   f"({result.shape[1]}x{result.shape[0]})")


@main.command('mask-overlay')
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_path', type=click.Path(dir_okay=False))
@click.option('--settings', '-s', 'settings_path', type=click.Path(exists=True, dir_okay=False),
              required=True, help='Edit settings file (YAML or JSON)')
@click.option('--mask-id', '-m', required=True, help='Mask to visualise')
@click.option('--lut', 'lut_path', type=click.Path(exists=True, dir_okay=False),
              help='LUT lattice saved as .npy')
@click.option('--max-size', type=int, default=None, help='Downscale the longest side to this')
@click.pass_context
def mask_overlay(ctx, input_path: str, output_path: str, settings_path: str,
                 mask_id: str, lut_path: Optional[str], max_size: Optional[int]):
    """
    Render INPUT_PATH with one mask highlighted in red.
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    try:
        settings = load_edit_settings(settings_path)
        processor = _build_processor(config, max_size, None)
        result = processor.render_mask_overlay(load_image(input_path), settings, mask_id,
                                              lut=_load_lut(lut_path))
        save_image(result, output_path)
    except CLI_ERRORS as e:
        logger.error(f"Mask overlay failed: {e}")
        click.echo(f"❌ Mask overlay failed: {e}", err=True)
        sys.exit(1)

    if not quiet:
        click.echo(f"✅ Wrote mask overlay to {output_path}")


@main.command()
@click.argument('directory', type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.argument('output_dir', type=click.Path(file_okay=False, dir_okay=True))
@click.option('--settings', '-s', 'settings_path', type=click.Path(exists=True, dir_okay=False),
              required=True, help='Edit settings file applied to every image')
@click.option('--lut', 'lut_path', type=click.Path(exists=True, dir_okay=False),
              help='LUT lattice saved as .npy')
@click.option('--format', '-f', 'output_format', default=None,
              help='Output file extension (default from config)')
@click.option('--max-size', type=int, default=None, help='Downscale the longest side to this')
@click.option('--recursive/--no-recursive', default=False, help='Process subdirectories')
@click.pass_context
def batch(ctx, directory: str, output_dir: str, settings_path: str, lut_path: Optional[str],
          output_format: Optional[str], max_size: Optional[int], recursive: bool):
    """
    Render every image in DIRECTORY into OUTPUT_DIR with one settings file.
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    try:
        settings = load_edit_settings(settings_path)
        lut = _load_lut(lut_path)
    except CLI_ERRORS as e:
        logger.error(f"Batch setup failed: {e}")
        click.echo(f"❌ Batch setup failed: {e}", err=True)
        sys.exit(1)

    processor = _build_processor(config, max_size, None)
    output_format = (output_format or config.get('output', {}).get('format', 'png')).lstrip('.')

    directory_path = Path(directory)
    pattern = '**/*' if recursive else '*'
    photo_files = sorted(p for p in directory_path.glob(pattern)
                         if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS)

    if not photo_files:
        click.echo("❌ No images found in directory")
        return

    stats = ProcessingStats()
    stats.set_total(len(photo_files))
    output_root = Path(output_dir)

    for photo_path in tqdm(photo_files, desc="Rendering", disable=quiet):
        start = time.time()
        target = output_root / photo_path.relative_to(directory_path).with_suffix(f'.{output_format}')
        try:
            result = processor.render(load_image(photo_path), settings, lut)
            save_image(result, target, quality=config.get('output', {}).get('quality'))
            stats.add_result(True, time.time() - start)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to render {photo_path}: {e}")
            stats.add_error(str(photo_path), str(e))
            stats.add_result(False, time.time() - start)

    if not quiet:
        stats.print_summary()


if __name__ == '__main__':
    main()
