"""
Tests for colour-space conversion and the color mixer.
"""

import numpy as np
import pytest

from darkroom.processing.color import (
    rgb_to_hsl, hsl_to_rgb, ColorMixer, ColorMixerChannel,
    mixer_adjust, apply_color_mixer
)
from darkroom.processing.color.color_mixer import band_weight


class TestColorSpace:
    """Test RGB <-> HSL conversion."""

    def test_round_trip_random_triples(self):
        """Round trip stays within 1/255 for random colours."""
        rng = np.random.default_rng(42)
        rgb = rng.integers(0, 256, size=(10000, 3)).astype(np.float64)
        rgb[:100] = rgb[:100, :1]  # include gray inputs

        h, s, l = rgb_to_hsl(rgb[:, 0], rgb[:, 1], rgb[:, 2])
        r, g, b = hsl_to_rgb(h, s, l)

        np.testing.assert_allclose(np.stack([r, g, b], axis=1), rgb, atol=1.0 / 255.0)

    def test_achromatic_maps_to_zero_hue_and_saturation(self):
        """Gray inputs convert without dividing by zero."""
        for value in (0, 77, 128, 255):
            h, s, l = rgb_to_hsl(value, value, value)
            assert h == 0
            assert s == 0
            assert l == pytest.approx(value / 255.0)

    def test_primary_colours(self):
        """Pure primaries land on their hue angles."""
        assert rgb_to_hsl(255, 0, 0) == pytest.approx((0.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 255, 0) == pytest.approx((1.0 / 3.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 0, 255) == pytest.approx((2.0 / 3.0, 1.0, 0.5))
        assert rgb_to_hsl(0, 255, 255)[0] == pytest.approx(0.5)

    def test_scalar_inputs_return_scalars(self):
        """Single pixels come back as plain numbers."""
        r, g, b = hsl_to_rgb(0.0, 1.0, 0.5)
        assert np.ndim(r) == 0
        assert (r, g, b) == pytest.approx((255.0, 0.0, 0.0))


class TestColorMixer:
    """Test hue-banded mixer adjustments."""

    def test_band_weight_wraps_around_the_wheel(self):
        """Angular distance wraps at 360 degrees."""
        assert band_weight(350.0, 0.0, 45.0) == pytest.approx(1.0 - 10.0 / 45.0)
        assert band_weight(10.0, 360.0, 45.0) == pytest.approx(1.0 - 10.0 / 45.0)
        assert band_weight(100.0, 0.0, 45.0) == 0

    def test_neutral_mixer_has_no_delta(self):
        """Default mixer yields zero deltas."""
        delta = mixer_adjust(0.3, ColorMixer())
        assert (delta.dh, delta.ds, delta.dl) == (0, 0, 0)

    def test_single_band_full_weight(self):
        """A hue at a band centre gets the band's full deltas."""
        mixer = ColorMixer(aqua=ColorMixerChannel(hue=10, saturation=-20, luminance=50))
        delta = mixer_adjust(0.5, mixer)
        assert delta.dh == pytest.approx(10)
        assert delta.ds == pytest.approx(-20)
        assert delta.dl == pytest.approx(50)

    def test_red_band_counts_both_ends(self):
        """Red is summed from its 0 and 360 degree segments."""
        mixer = ColorMixer(red=ColorMixerChannel(saturation=10))
        assert mixer_adjust(0.0, mixer).ds == pytest.approx(20)

    def test_adjacent_bands_overlap(self):
        """A hue between orange and yellow picks up both."""
        mixer = ColorMixer(
            orange=ColorMixerChannel(luminance=10),
            yellow=ColorMixerChannel(luminance=10),
        )
        delta = mixer_adjust(45.0 / 360.0, mixer)
        expected = 10 * (1 - 15.0 / 30.0) + 10 * (1 - 15.0 / 35.0)
        assert delta.dl == pytest.approx(expected)

    def test_hue_shift_wraps(self):
        """Blue shifted by +120 degrees wraps round to red."""
        mixer = ColorMixer(blue=ColorMixerChannel(hue=120))
        r, g, b = apply_color_mixer(0.0, 0.0, 255.0, mixer)
        assert (r, g, b) == pytest.approx((255.0, 0.0, 0.0), abs=1e-6)

    def test_desaturate_band(self):
        """Saturation -100 on aqua turns cyan gray."""
        mixer = ColorMixer(aqua=ColorMixerChannel(saturation=-100))
        r, g, b = apply_color_mixer(0.0, 255.0, 255.0, mixer)
        assert r == pytest.approx(g)
        assert g == pytest.approx(b)

    def test_untouched_pixels_keep_unclamped_values(self):
        """Pixels outside every active band pass through as-is."""
        mixer = ColorMixer(blue=ColorMixerChannel(saturation=50))
        r = np.array([300.0, 0.0])
        g = np.array([-5.0, 0.0])
        b = np.array([0.0, 255.0])
        out_r, out_g, out_b = apply_color_mixer(r, g, b, mixer)
        assert out_r[0] == 300.0
        assert out_g[0] == -5.0

    def test_mixer_dict_round_trip(self):
        """Mixer converts to and from plain dicts."""
        mixer = ColorMixer(magenta=ColorMixerChannel(hue=5, saturation=6, luminance=7))
        assert ColorMixer.from_dict(mixer.to_dict()) == mixer

    def test_unknown_band(self):
        """Unknown band names are rejected."""
        with pytest.raises(ValueError):
            ColorMixer().channel('green')
