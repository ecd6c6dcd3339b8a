"""
Tests for the command line interface.
"""

import numpy as np
import pytest
import yaml
from click.testing import CliRunner

from cli import main
from darkroom.io import load_image, save_image

from conftest import make_buffer


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "edit.yaml"
    path.write_text(yaml.safe_dump({
        'exposure': 50,
        'masks': [{'type': 'linear', 'id': 'sky', 'settings': {'exposure': -50}}],
    }))
    return path


@pytest.fixture
def image_file(tmp_path):
    return save_image(make_buffer(6, 6, (100, 100, 100)), tmp_path / "input.png")


def test_render(runner, tmp_path, image_file, settings_file):
    output = tmp_path / "render.png"
    result = runner.invoke(main, ['render', str(image_file), str(output),
                                  '--settings', str(settings_file)])
    assert result.exit_code == 0, result.output
    rendered = load_image(output)
    assert rendered.shape == (6, 6, 4)
    assert rendered[0, 0, 0] == 200


def test_render_with_lut(runner, tmp_path, image_file):
    lut_path = tmp_path / "invert.npy"
    lattice = np.zeros((2, 2, 2, 3), dtype=np.float32)
    lattice[0, 0, 0] = 1.0
    np.save(lut_path, lattice)
    output = tmp_path / "graded.png"
    result = runner.invoke(main, ['render', str(image_file), str(output), '--lut', str(lut_path)])
    assert result.exit_code == 0, result.output
    assert load_image(output)[0, 0, 0] == 255


def test_mask_overlay_unknown_mask(runner, tmp_path, image_file, settings_file):
    result = runner.invoke(main, ['mask-overlay', str(image_file), str(tmp_path / "o.png"),
                                  '--settings', str(settings_file), '--mask-id', 'nope'])
    assert result.exit_code == 1


def test_mask_overlay(runner, tmp_path, image_file, settings_file):
    output = tmp_path / "overlay.png"
    result = runner.invoke(main, ['mask-overlay', str(image_file), str(output),
                                  '--settings', str(settings_file), '--mask-id', 'sky'])
    assert result.exit_code == 0, result.output
    assert output.exists()


def test_batch(runner, tmp_path, settings_file):
    source = tmp_path / "photos"
    for name in ("a.png", "b.png"):
        save_image(make_buffer(4, 4, (60, 60, 60)), source / name)
    (source / "notes.txt").write_text("skip me")

    result = runner.invoke(main, ['-q', 'batch', str(source), str(tmp_path / "out"),
                                  '--settings', str(settings_file), '--format', 'jpg'])
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["a.jpg", "b.jpg"]


@pytest.fixture
def broken_settings(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("exposure: [1, 2\n")
    return path


def test_render_malformed_settings(runner, tmp_path, image_file, broken_settings):
    result = runner.invoke(main, ['render', str(image_file), str(tmp_path / "r.png"),
                                  '--settings', str(broken_settings)])
    assert result.exit_code == 1
    assert "Render failed" in result.output


def test_batch_malformed_settings(runner, tmp_path, image_file, broken_settings):
    result = runner.invoke(main, ['batch', str(tmp_path), str(tmp_path / "out"),
                                  '--settings', str(broken_settings)])
    assert result.exit_code == 1
    assert "Batch setup failed" in result.output


def test_mask_overlay_with_lut(runner, tmp_path, image_file, settings_file):
    """The overlay sits on the same graded image that render produces."""
    lut_path = tmp_path / "white.npy"
    np.save(lut_path, np.ones((2, 2, 2, 3), dtype=np.float32))
    output = tmp_path / "overlay.png"
    result = runner.invoke(main, ['mask-overlay', str(image_file), str(output),
                                  '--settings', str(settings_file), '--mask-id', 'sky',
                                  '--lut', str(lut_path)])
    assert result.exit_code == 0, result.output
    assert load_image(output)[0, 0, 1] == 255
