"""Tests for the render.py command line."""

import numpy as np
import PIL.Image
import pytest

import render
from fractals import ColormapRange, Complex, Direction, FractalType, HslRange, HueWheel, RgbRange


def parse(*args):
    parser = render.build_parser()
    return parser, parser.parse_args(list(args))


class TestResolveParams:

    def test_mandelbrot_defaults(self):
        parser, opt = parse()
        params = render.resolve_params(opt, parser)
        assert params.fractal_type is FractalType.MANDELBROT
        assert params.max_iterations == 400
        assert params.min == Complex(-2.0, -1.12)

    def test_julia_overrides(self):
        parser, opt = parse("--type", "julia", "--c-imag", "0.745", "--c-real", "-0.123", "--max-iterations", "120")
        params = render.resolve_params(opt, parser)
        assert params.fractal_type is FractalType.JULIA_SET
        assert params.c == Complex(-0.123, 0.745)
        assert params.max_iterations == 120

    def test_viewport_override(self):
        parser, opt = parse("--min-real", "-1", "--max-real", "1", "--min-imag", "-0.5", "--max-imag", "0.5")
        params = render.resolve_params(opt, parser)
        assert params.min == Complex(-1.0, -0.5)
        assert params.max == Complex(1.0, 0.5)

    @pytest.mark.parametrize(
        "args",
        [
            ("--c-real", "0.3"),
            ("--type", "julia", "--power", "3"),
            ("--power", "1"),
            ("--max-iterations", "0"),
            ("--min-real", "1", "--max-real", "0"),
        ],
    )
    def test_invalid(self, args):
        parser, opt = parse(*args)
        with pytest.raises(SystemExit):
            render.resolve_params(opt, parser)


class TestResolveRaster:

    def test_height_from_aspect(self):
        parser, opt = parse("--type", "julia", "--width", "300")
        params, width, height = render.resolve_raster(opt, render.resolve_params(opt, parser), parser)
        assert (width, height) == (300, 200)

    def test_zoom(self):
        parser, opt = parse("--type", "julia", "--width", "300", "--zoom", "150", "100", "75", "50")
        params, width, height = render.resolve_raster(opt, render.resolve_params(opt, parser), parser)
        assert params.min.real == pytest.approx(-0.75)
        assert params.max.imag == pytest.approx(0.0)
        assert (width, height) == (300, 200)

    def test_zoom_outside_raster(self):
        parser, opt = parse("--type", "julia", "--width", "300", "--zoom", "0", "0", "400", "50")
        with pytest.raises(SystemExit):
            render.resolve_raster(opt, render.resolve_params(opt, parser), parser)


class TestResolvePalette:

    def test_hsl(self):
        parser, opt = parse("--hsl-start", "30,1,0.5", "--direction", "negative")
        palette = render.resolve_palette(opt, parser)
        assert isinstance(palette, HslRange)
        assert palette.start.hue == 30.0
        assert palette.direction is Direction.NEGATIVE

    def test_rgb(self):
        parser, opt = parse("--palette", "rgb", "--rgb-start", "#000000", "--rgb-end", "#FFFFFF")
        palette = render.resolve_palette(opt, parser)
        assert isinstance(palette, RgbRange)

    def test_colormap(self):
        parser, opt = parse("--palette", "colormap", "--colormap", "inferno", "--invert")
        palette = render.resolve_palette(opt, parser)
        assert isinstance(palette, ColormapRange)
        assert palette.invert

    def test_hue(self):
        parser, opt = parse("--palette", "hue", "--hue-offset", "30")
        palette = render.resolve_palette(opt, parser)
        assert palette == HueWheel(offset=30.0)

    def test_negative_hue(self):
        parser, opt = parse("--hsl-start=-30,1,0.5")
        palette = render.resolve_palette(opt, parser)
        assert palette.start.hue == 330.0

    @pytest.mark.parametrize(
        "args",
        [
            ("--hsl-start", "30,1"),
            ("--hsl-end", "30,2,0.5"),
            ("--palette", "rgb", "--rgb-end", "#XYZ123"),
            ("--palette", "colormap", "--colormap", "nope"),
        ],
    )
    def test_invalid(self, args):
        parser, opt = parse(*args)
        with pytest.raises(SystemExit):
            render.resolve_palette(opt, parser)


class TestResolveOutputConfig:

    def test_default_output(self):
        parser, opt = parse()
        config = render.resolve_output_config(opt, parser)
        assert config.image_path.name == "fractal.png"
        assert config.progress_gif is None

    def test_suffix_added(self, tmp_path):
        parser, opt = parse("--output", str(tmp_path / "out"), "--format", "jpg", "--progress-gif", str(tmp_path / "p"))
        config = render.resolve_output_config(opt, parser)
        assert config.image_path.name == "out.jpg"
        assert config.progress_gif.name == "p.gif"

    def test_mismatched_suffix(self, tmp_path):
        parser, opt = parse("--output", str(tmp_path / "out.png"), "--format", "webp")
        with pytest.raises(SystemExit):
            render.resolve_output_config(opt, parser)

    def test_progress_gif_requires_incremental(self, tmp_path):
        parser, opt = parse("--engine", "vectorized", "--progress-gif", str(tmp_path / "p.gif"))
        with pytest.raises(SystemExit):
            render.resolve_output_config(opt, parser)


class TestFrameBatches:

    def test_split_row_major(self):
        iterations = np.arange(7 * 1000, dtype=np.uint32).reshape(1000, 7)
        batches = list(render.frame_batches(iterations))
        assert [points.num_points for points in batches] == [5000, 2000]
        assert (batches[1].x_start, batches[1].y_start) == (5000 % 7, 5000 // 7)
        np.testing.assert_array_equal(batches[1].valid_values(), iterations.reshape(-1)[5000:])


class TestMain:

    def test_renders_image_and_progress_gif(self, tmp_path, capsys):
        output = tmp_path / "mandel.png"
        gif = tmp_path / "progress.gif"
        render.main([
            "--width", "32",
            "--max-iterations", "40",
            "--max-duration", "0",
            "--output", str(output),
            "--progress-gif", str(gif),
            "--stats",
        ])
        assert output.is_file()
        assert gif.is_file()
        with PIL.Image.open(output) as image:
            assert image.size == (32, 29)
        assert "Iterations:" in capsys.readouterr().out

    def test_julia_with_colormap(self, tmp_path):
        output = tmp_path / "julia.png"
        render.main([
            "--type", "julia",
            "--width", "30",
            "--max-iterations", "50",
            "--palette", "colormap",
            "--colormap", "viridis",
            "--output", str(output),
        ])
        with PIL.Image.open(output) as image:
            assert image.size == (30, 20)

    def test_invalid_background_falls_back(self, tmp_path, capsys):
        output = tmp_path / "bg.png"
        render.main(["--width", "16", "--max-iterations", "20", "--background", "nope", "--output", str(output)])
        assert "defaulting to black" in capsys.readouterr().out
        assert output.is_file()

    def test_negative_start_hue(self, tmp_path):
        output = tmp_path / "wrapped.png"
        render.main(["--width", "24", "--max-iterations", "400", "--hsl-start=-30,1,0.5", "--output", str(output)])
        assert output.is_file()

    def test_hue_palette(self, tmp_path):
        output = tmp_path / "hue.png"
        render.main(["--type", "julia", "--width", "30", "--max-iterations", "50", "--palette", "hue", "--output", str(output)])
        with PIL.Image.open(output) as image:
            assert image.size == (30, 20)
