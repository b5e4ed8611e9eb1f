"""Tests for the rasterkit sub-commands."""

import logging

import numpy as np
import pytest
from PIL import Image

import rasterkit
from cli.batch import find_images, output_path_for, run_batch
from cli.process import config_from_args
from processing import ProcessConfig


@pytest.fixture
def photo(tmp_path):
    """Small RGB image whose left half is dark and right half bright."""
    array = np.zeros((6, 8, 3), dtype=np.uint8)
    array[:, :4] = 30
    array[:, 4:] = 220
    path = tmp_path / "photo.png"
    Image.fromarray(array).save(path)
    return path


@pytest.fixture
def recipe_file(tmp_path):
    path = tmp_path / "recipe.yaml"
    path.write_text("grayscale: true\nthreshold:\n  method: otsu\n")
    return path


def parse(*argv):
    return rasterkit.build_parser().parse_args(["process", "in.png", "out.png", *argv])


class TestConfigFromArgs:
    """Tests for building a ProcessConfig from process options."""

    def test_no_options_is_default(self):
        assert config_from_args(parse()) == ProcessConfig()

    def test_options(self):
        config = config_from_args(parse(
            "--kernel", "smoothing", "--kernel", "edge", "--combine", "--policy", "or",
            "--threshold", "localized", "--zones", "4", "2", "--negative",
        ))
        assert config.kernels == ("smoothing", "edge")
        assert config.kernel_mode == "combine"
        assert config.combine_policy == "or"
        assert config.threshold_method == "localized"
        assert (config.horizontal_zones, config.vertical_zones) == (4, 2)
        assert config.negative

    def test_options_override_recipe(self, recipe_file):
        config = config_from_args(parse("--recipe", str(recipe_file), "--threshold", "fixed"))
        assert config.grayscale
        assert config.threshold_method == "fixed"

    def test_hex_filter(self):
        assert config_from_args(parse("--filter", "00ff00")).rgb_filter == (0, 255, 0)

    def test_invalid_value_raises(self):
        with pytest.raises(ValueError):
            config_from_args(parse("--threshold-value", "300"))

    def test_unknown_kernel_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            parse("--kernel", "blur")


class TestProcessCommand:
    """Tests for rasterkit process."""

    def test_threshold_writes_binary_image(self, photo, tmp_path):
        out = tmp_path / "out" / "result.png"
        assert rasterkit.main(["process", str(photo), str(out), "--grayscale", "--threshold", "otsu"]) == 0
        result = np.asarray(Image.open(out))
        assert set(np.unique(result)) == {0, 255}
        assert np.all(result[:, :4] == 0)

    def test_artifacts(self, photo, tmp_path):
        artifacts = tmp_path / "steps"
        code = rasterkit.main([
            "process", str(photo), str(tmp_path / "out.png"),
            "--negative", "--artifacts", str(artifacts),
        ])
        assert code == 0
        assert (artifacts / "01_negative.png").exists()

    def test_missing_input_fails(self, tmp_path, caplog):
        caplog.set_level(logging.ERROR)
        assert rasterkit.main(["process", str(tmp_path / "nope.png"), str(tmp_path / "out.png")]) == 1
        assert "nope.png" in caplog.text

    def test_flat_image_stretch_fails(self, tmp_path):
        path = tmp_path / "flat.png"
        Image.new("L", (4, 4), 80).save(path)
        assert rasterkit.main(["process", str(path), str(tmp_path / "out.png"), "--contrast", "stretch"]) == 1

    def test_bad_recipe_fails(self, photo, tmp_path):
        recipe = tmp_path / "bad.yaml"
        recipe.write_text("threshold: {method: adaptive}\n")
        assert rasterkit.main(["process", str(photo), str(tmp_path / "o.png"), "--recipe", str(recipe)]) == 1


class TestBatchCommand:
    """Tests for rasterkit batch."""

    def test_find_images_filters_and_sorts(self, tmp_path):
        for name in ("b.png", "a.JPG", "notes.txt"):
            (tmp_path / name).write_bytes(b"")
        assert [p.name for p in find_images(tmp_path)] == ["a.JPG", "b.png"]

    def test_output_path(self, tmp_path):
        source = tmp_path / "in" / "sub" / "x.jpg"
        target = output_path_for(source, tmp_path / "in", tmp_path / "out", "png")
        assert target == tmp_path / "out" / "sub" / "x.png"

    @pytest.mark.slow
    def test_batch_processes_every_image(self, photo, recipe_file, tmp_path):
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        for name in ("one.png", "two.png"):
            (input_dir / name).write_bytes(photo.read_bytes())
        output_dir = tmp_path / "out"

        assert rasterkit.main(["batch", str(input_dir), str(output_dir), "--recipe", str(recipe_file)]) == 0
        assert sorted(p.name for p in output_dir.iterdir()) == ["one.png", "two.png"]

    def test_keep_going_counts_failures(self, photo, tmp_path):
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        (input_dir / "good.png").write_bytes(photo.read_bytes())
        (input_dir / "broken.png").write_bytes(b"not an image")
        stats = run_batch(input_dir, tmp_path / "out", ProcessConfig(negative=True), keep_going=True)
        assert stats == {"found": 2, "processed": 1, "failed": 1}

    def test_failure_stops_without_keep_going(self, tmp_path, recipe_file):
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        (input_dir / "broken.png").write_bytes(b"not an image")
        assert rasterkit.main(["batch", str(input_dir), str(tmp_path / "out"), "--recipe", str(recipe_file)]) == 1

    def test_missing_directory_fails(self, tmp_path, recipe_file):
        assert rasterkit.main(["batch", str(tmp_path / "nope"), str(tmp_path / "out"), "--recipe", str(recipe_file)]) == 1


class TestInfoCommands:
    """Tests for identify, histogram and kernels."""

    def test_identify(self, photo, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        other = tmp_path / "data.bin"
        other.write_bytes(b"\x00\x01")
        assert rasterkit.main(["identify", str(photo), str(other)]) == 0
        assert "png" in caplog.text
        assert "unknown" in caplog.text

    def test_identify_missing_file(self, tmp_path):
        assert rasterkit.main(["identify", str(tmp_path / "missing.bmp")]) == 1

    def test_histogram_with_otsu_and_plot(self, photo, tmp_path, caplog):
        caplog.set_level(logging.INFO)
        plot = tmp_path / "hist.png"
        assert rasterkit.main(["histogram", str(photo), "--otsu", "--plot", str(plot)]) == 0
        assert "Otsu threshold: 31" in caplog.text
        assert Image.open(plot).size == (256, 100)

    def test_kernels(self, caplog):
        caplog.set_level(logging.INFO)
        assert rasterkit.main(["kernels", "--show"]) == 0
        assert "edge_sobel_vertical" in caplog.text
        assert "Sobel Vertical Edge" in caplog.text
