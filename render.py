import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import logging

import numpy as np
import PIL.Image
import imageio

from fractals import (
    MAX_DURATION,
    MAX_POINTS,
    Canvas,
    ColormapRange,
    ColorRange,
    Complex,
    Direction,
    FractalCalculator,
    FractalParams,
    HslColor,
    HslRange,
    HueWheel,
    Points,
    RgbColor,
    RgbRange,
    Stats,
)
from fractals.params import DEFAULT_WIDTH


@dataclass
class OutputConfig:
    image_path: Path
    image_format: str
    progress_gif: Path | None


def build_parser():
    parser = ArgumentParser()

    parser.add_argument('--type', dest='fractal_type', choices=['mandelbrot', 'julia'], default='mandelbrot',
                        help='fractal to render')

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per sample (100-1000 works well)',
                        metavar='MAX_ITERATIONS', default=None)

    parser.add_argument('--power', type=int,
                        dest='power', help='exponent of the Mandelbrot iteration z -> z^power + c',
                        metavar='POWER', default=2)

    parser.add_argument('--c-real', type=float, dest='c_real', default=None,
                        help='real part of the Julia set parameter c')
    parser.add_argument('--c-imag', type=float, dest='c_imag', default=None,
                        help='imaginary part of the Julia set parameter c')

    parser.add_argument('--min-real', type=float, dest='min_real', default=None,
                        help='real part of the lower viewport corner')
    parser.add_argument('--min-imag', type=float, dest='min_imag', default=None,
                        help='imaginary part of the lower viewport corner')
    parser.add_argument('--max-real', type=float, dest='max_real', default=None,
                        help='real part of the upper viewport corner')
    parser.add_argument('--max-imag', type=float, dest='max_imag', default=None,
                        help='imaginary part of the upper viewport corner')

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the raster in pixels',
                        metavar='WIDTH', default=DEFAULT_WIDTH)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the raster in pixels. Derived from the viewport aspect ratio when omitted.',
                        metavar='HEIGHT', default=None)

    parser.add_argument('--zoom', type=int, nargs=4, dest='zoom', metavar=('X0', 'Y0', 'X1', 'Y1'),
                        help='zoom into the pixel rectangle selected on the configured raster')

    parser.add_argument('--engine', choices=['incremental', 'vectorized'], default='incremental',
                        help='"incremental" computes time-sliced batches, "vectorized" renders the whole frame with TensorFlow')

    parser.add_argument('--max-duration', type=float, dest='max_duration', default=MAX_DURATION,
                        help='seconds of work per incremental batch')

    parser.add_argument('--palette', choices=['hsl', 'rgb', 'colormap', 'hue'], default='hsl',
                        help='color range used to map iteration counts to colors')
    parser.add_argument('--hsl-start', type=str, dest='hsl_start', default='0,1,0.5',
                        help='start of the HSL range as "hue,saturation,lightness"')
    parser.add_argument('--hsl-end', type=str, dest='hsl_end', default='300,1,0.5',
                        help='end of the HSL range as "hue,saturation,lightness"')
    parser.add_argument('--rgb-start', type=str, dest='rgb_start', default='#000080',
                        help='start of the RGB range as #RRGGBB')
    parser.add_argument('--rgb-end', type=str, dest='rgb_end', default='#FFFF00',
                        help='end of the RGB range as #RRGGBB')
    parser.add_argument('--direction', choices=['positive', 'negative'], default='positive',
                        help='interpolation direction around each color channel')
    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap used by the colormap palette (e.g. "viridis", "inferno")',
                        metavar='COLORMAP', default='twilight_shifted')
    parser.add_argument('--hue-offset', type=float, dest='hue_offset', default=0.0,
                        help='hue in degrees where the hue palette starts')
    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')
    parser.add_argument('--background', type=str, default='#000000',
                        help='Hex color for points that did not escape.')

    parser.add_argument('--output', dest='output', type=str, default=None,
                        help='Destination of the final image.')
    parser.add_argument('--format', type=str,
                        dest='format', help='file format of the final image. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')
    parser.add_argument('--progress-gif', dest='progress_gif', type=str, default=None,
                        help='Record every incremental batch as a frame of this GIF.')

    parser.add_argument('--stats', action='store_true', help='Print throughput statistics after rendering.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including per-batch statistics and TensorFlow diagnostics.')

    return parser


def _parse_hsl(value: str, parser: ArgumentParser) -> HslColor:
    try:
        hue, saturation, lightness = (float(part) for part in value.split(','))
    except ValueError:
        parser.error(f"Invalid HSL color '{value}', expected \"hue,saturation,lightness\".")
    if not (0.0 <= saturation <= 1.0 and 0.0 <= lightness <= 1.0):
        parser.error(f"Saturation and lightness of '{value}' must be within [0, 1].")
    return HslColor(hue, saturation, lightness)


def _parse_rgb(value: str, parser: ArgumentParser) -> RgbColor:
    try:
        return RgbColor.from_hex(value)
    except ValueError as exc:
        parser.error(str(exc))


def resolve_params(opt, parser: ArgumentParser) -> FractalParams:
    if opt.fractal_type == 'mandelbrot':
        if opt.c_real is not None or opt.c_imag is not None:
            parser.error("--c-real/--c-imag are only valid with --type julia.")
        params = FractalParams.mandelbrot(power=opt.power)
    else:
        if opt.power != 2:
            parser.error("--power is only valid with --type mandelbrot.")
        default = FractalParams.julia_set()
        c = Complex(
            default.c.real if opt.c_real is None else opt.c_real,
            default.c.imag if opt.c_imag is None else opt.c_imag,
        )
        params = FractalParams.julia_set(c=c)

    c_min = Complex(
        params.min.real if opt.min_real is None else opt.min_real,
        params.min.imag if opt.min_imag is None else opt.min_imag,
    )
    c_max = Complex(
        params.max.real if opt.max_real is None else opt.max_real,
        params.max.imag if opt.max_imag is None else opt.max_imag,
    )
    max_iterations = params.max_iterations if opt.max_iterations is None else opt.max_iterations

    params = FractalParams(
        fractal_type=params.fractal_type,
        max_iterations=max_iterations,
        min=c_min,
        max=c_max,
        power=params.power,
        c=params.c,
    )
    try:
        params.validate()
    except ValueError as exc:
        parser.error(str(exc))
    return params


def resolve_raster(opt, params: FractalParams, parser: ArgumentParser) -> tuple[FractalParams, int, int]:
    if opt.width <= 0:
        parser.error("--width must be positive.")
    if opt.height is not None and opt.height <= 0:
        parser.error("--height must be positive.")

    width = opt.width
    height = opt.height if opt.height is not None else params.canvas_height(width)

    if opt.zoom:
        x0, y0, x1, y1 = opt.zoom
        if not all(0 <= x <= width for x in (x0, x1)) or not all(0 <= y <= height for y in (y0, y1)):
            parser.error(f"--zoom selection must lie within the {width}x{height} raster.")
        try:
            params = params.zoom_to_selection(x0, y0, x1, y1, width, height)
        except ValueError as exc:
            parser.error(str(exc))
        if opt.height is None:
            height = params.canvas_height(width)

    if height <= 0:
        parser.error("The viewport is too flat for the requested width; pass --height explicitly.")
    return params, width, height


def resolve_palette(opt, parser: ArgumentParser) -> ColorRange:
    direction = Direction(opt.direction)
    if opt.palette == 'hsl':
        return HslRange(_parse_hsl(opt.hsl_start, parser), _parse_hsl(opt.hsl_end, parser), direction)
    if opt.palette == 'rgb':
        return RgbRange(_parse_rgb(opt.rgb_start, parser), _parse_rgb(opt.rgb_end, parser), direction)
    if opt.palette == 'hue':
        return HueWheel(offset=opt.hue_offset)
    try:
        return ColormapRange(opt.colormap, invert=bool(opt.invert))
    except ValueError as exc:
        parser.error(str(exc))


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    if opt.output:
        output_path = Path(opt.output).expanduser()
        if output_path.exists() and output_path.is_dir():
            parser.error("--output must point to a file, not a directory.")
        suffix = output_path.suffix
        expected_suffix = f".{image_format}"
        if suffix:
            if suffix.lower() != expected_suffix.lower():
                parser.error(f"--output extension {suffix} does not match --format {image_format}.")
        else:
            output_path = output_path.with_suffix(expected_suffix)
    else:
        output_path = Path(f"fractal.{image_format}")

    progress_gif = None
    if opt.progress_gif:
        if opt.engine != 'incremental':
            parser.error("--progress-gif requires the incremental engine.")
        progress_gif = Path(opt.progress_gif).expanduser()
        if progress_gif.suffix:
            if progress_gif.suffix.lower() != ".gif":
                parser.error("--progress-gif must end with .gif.")
        else:
            progress_gif = progress_gif.with_suffix(".gif")
        progress_gif = progress_gif.resolve()

    return OutputConfig(
        image_path=output_path.resolve(),
        image_format=image_format,
        progress_gif=progress_gif,
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def frame_batches(iterations: np.ndarray) -> Iterator[Points]:
    """Split a full frame of iteration counts into row-major batches."""

    height, width = iterations.shape
    flat = iterations.reshape(-1)
    for offset in range(0, flat.size, MAX_POINTS):
        chunk = flat[offset:offset + MAX_POINTS]
        points = Points(x_start=offset % width, y_start=offset // width, num_points=chunk.size)
        points.values[:chunk.size] = chunk
        yield points


def run_incremental(
    calculator: FractalCalculator,
    canvas: Canvas,
    stats: Stats | None = None,
    gif_writer: Any = None,
) -> int:
    """Drive ``calculator`` until done, painting each batch. Returns the batch count."""

    batches = 0
    while not calculator.is_done():
        points = calculator.calculate(stats)
        canvas.draw_results(points)
        batches += 1
        print("batch {0}: {1:.1%} done".format(batches, calculator.progress()), end='\r')
        if gif_writer is not None:
            gif_writer.append_data(canvas.to_array())
        if stats is not None:
            log(stats.format_stats())
    print()
    return batches


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    logging.basicConfig(level=logging.INFO if VERBOSE else logging.WARNING)

    params = resolve_params(opt, parser)
    params, width, height = resolve_raster(opt, params, parser)
    palette = resolve_palette(opt, parser)
    output_config = resolve_output_config(opt, parser)

    try:
        canvas = Canvas(width, height, palette, params.max_iterations, background=opt.background)
    except ValueError:
        print(f"Invalid background '{opt.background}', defaulting to black.")
        canvas = Canvas(width, height, palette, params.max_iterations)

    log("Rendering %s %dx%d, viewport %s..%s, %d iterations" % (
        params.fractal_type.value, width, height, params.min, params.max, params.max_iterations))

    if opt.stats and opt.engine != 'incremental':
        parser.error("--stats requires the incremental engine.")
    stats = Stats(width * height) if opt.stats else None

    if opt.engine == 'vectorized':
        from fractals.vectorized import render_frame

        result = render_frame(params, width, height)
        for points in frame_batches(result.iterations):
            canvas.draw_results(points)
    else:
        calculator = FractalCalculator(params, width, height, max_duration=opt.max_duration)
        gif_writer = None
        if output_config.progress_gif is not None:
            output_config.progress_gif.parent.mkdir(parents=True, exist_ok=True)
            gif_writer = imageio.get_writer(str(output_config.progress_gif), mode='I', duration=0.1, loop=0)
        try:
            run_incremental(calculator, canvas, stats, gif_writer)
        finally:
            if gif_writer is not None:
                gif_writer.close()

    write_single_image(canvas.to_image(), output_config.image_path, output_config.image_format)
    print(f"Wrote {output_config.image_path}")

    if stats is not None:
        print(stats.format_stats())


if __name__ == '__main__':
    main()
