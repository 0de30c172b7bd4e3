"""
tests.py

Unit tests for the slit interference project.

How to run:
    python -m unittest -v tests.py

Notes:
- These are *unit* tests: they validate small pieces (config/params/geometry/
  far field/near field).
- Small pipeline tests check that runners, I/O and plotting connect without
  crashing.
"""

from __future__ import annotations

import logging
import math
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np

import config
import constants
import far_field
import geometry
import io_slits
import logging_config
import near_field
import parameters
import plotting
import scan_source
import simulation
from parameters import SimulationMode, SourcePosition


ALL_MODES = (SimulationMode.SINGLE, SimulationMode.DOUBLE, SimulationMode.GRATING)


def _intensity(x, params: parameters.WaveParams, mode: SimulationMode) -> float:
    return far_field.intensity_for_params(x, params, mode)


class TestConfig(unittest.TestCase):
    def test_default_config_is_valid(self) -> None:
        cfg = config.default_simulation_config()
        # Should not raise
        config.validate_config(cfg)

        self.assertEqual(cfg.n_points, 300)
        self.assertEqual(cfg.grid_stride, 3)
        self.assertEqual(cfg.pixel_scale, constants.PIXELS_PER_UM)
        self.assertTrue(cfg.check_nan)

    def test_custom_config_overrides(self) -> None:
        cfg = config.custom_simulation_config(n_points=11, grid_stride=5, verbose=True)
        config.validate_config(cfg)
        self.assertEqual(cfg.n_points, 11)
        self.assertEqual(cfg.grid_stride, 5)
        self.assertTrue(cfg.verbose)
        self.assertEqual(cfg.canvas_width, 800)

    def test_validate_config_rejects_invalid(self) -> None:
        bad = [
            dict(n_points=1),
            dict(range_scale=0.0),
            dict(canvas_width=0),
            dict(pixel_scale=-1.0),
            dict(grid_stride=0),
            dict(grid_stride=500),
            dict(frame_rate=0.0),
            dict(n_frames=0),
        ]
        for kwargs in bad:
            with self.subTest(**kwargs):
                with self.assertRaises(ValueError):
                    config.validate_config(config.custom_simulation_config(**kwargs))


class TestParameters(unittest.TestCase):
    def test_mode_parse(self) -> None:
        self.assertIs(SimulationMode.parse("double"), SimulationMode.DOUBLE)
        self.assertIs(SimulationMode.parse("Grating"), SimulationMode.GRATING)
        self.assertIs(SimulationMode.parse(SimulationMode.SINGLE), SimulationMode.SINGLE)

        with self.assertRaises(ValueError):
            SimulationMode.parse("triple")

    def test_defaults_per_mode(self) -> None:
        single = parameters.default_wave_params(SimulationMode.SINGLE)
        double = parameters.default_wave_params("double")
        grating = parameters.default_wave_params(SimulationMode.GRATING)

        self.assertEqual(single.slit_width, 10.0)
        self.assertEqual(double.slit_separation, 10.0)
        self.assertEqual(grating.slit_count, 5)
        for p in (single, double, grating):
            self.assertEqual(p.wavelength, 500.0)
            self.assertEqual(p.source_position, SourcePosition(-20.0, 0.0))

    def test_slit_count_for_mode(self) -> None:
        p = parameters.default_wave_params(SimulationMode.GRATING)
        self.assertEqual(parameters.slit_count_for_mode(p, SimulationMode.SINGLE), 1)
        self.assertEqual(parameters.slit_count_for_mode(p, SimulationMode.DOUBLE), 2)
        self.assertEqual(parameters.slit_count_for_mode(p, SimulationMode.GRATING), 5)
        self.assertEqual(
            parameters.slit_count_for_mode(replace(p, slit_count=0), SimulationMode.GRATING),
            constants.FALLBACK_SLIT_COUNT,
        )

    def test_as_source_position(self) -> None:
        sp = SourcePosition(-20.0, 3.0)
        self.assertIs(parameters.as_source_position(sp), sp)
        self.assertEqual(parameters.as_source_position((-20.0, 3.0)), sp)
        with self.assertRaises(ValueError):
            parameters.as_source_position((float("nan"), 0.0))

    def test_make_wave_params_validation(self) -> None:
        p = parameters.make_wave_params(
            "grating",
            wavelength=600.0,
            slit_width=2.0,
            slit_separation=8.0,
            slit_count=4,
            distance_to_screen=2.0,
            source_position=(-30.0, 1.5),
        )
        self.assertIsInstance(p.source_position, SourcePosition)
        self.assertEqual(p.source_position.y, 1.5)
        self.assertEqual(p.slit_count, 4)

        base = dict(wavelength=500.0, slit_width=2.0, slit_separation=10.0, slit_count=2)

        with self.assertRaises(ValueError):
            parameters.make_wave_params("double", **{**base, "wavelength": 300.0})

        with self.assertRaises(ValueError):
            parameters.make_wave_params("double", **{**base, "slit_width": 0.0})

        with self.assertRaises(ValueError):
            parameters.make_wave_params("double", **{**base, "distance_to_screen": 0.0})

        with self.assertRaises(ValueError):
            parameters.make_wave_params("grating", **{**base, "slit_count": 1})

        with self.assertRaises(ValueError):
            parameters.make_wave_params("double", **{**base, "wavelength": float("nan")})

        with self.assertRaises(TypeError):
            parameters.make_wave_params("double", **{**base, "slit_width": "wide"})

    def test_overlapping_slits_warn(self) -> None:
        with self.assertLogs("slits.parameters", level="WARNING"):
            parameters.make_wave_params(
                "double", wavelength=500.0, slit_width=10.0, slit_separation=5.0, slit_count=2,
            )

    def test_mode_switch_and_source_helpers(self) -> None:
        p = parameters.default_wave_params(SimulationMode.DOUBLE)

        g = parameters.with_mode(p, SimulationMode.GRATING)
        self.assertEqual(g, parameters.default_wave_params(SimulationMode.GRATING))

        moved = parameters.with_source_position(p, -40.0, 3.0)
        self.assertEqual(moved.source_position, SourcePosition(-40.0, 3.0))
        self.assertEqual(moved.slit_width, p.slit_width)

        back = parameters.reset_source_position(moved, SimulationMode.DOUBLE)
        self.assertEqual(back.source_position, p.source_position)


class TestGeometry(unittest.TestCase):
    def test_emission_points_are_interior_and_even(self) -> None:
        pts = geometry.emission_points(0.0, 4.0, 3)
        np.testing.assert_allclose(pts, np.array([-1.0, 0.0, 1.0]), rtol=0.0, atol=1e-15)

    def test_single_slit_centered(self) -> None:
        s = geometry.resolve_secondary_sources(SimulationMode.SINGLE, 10.0, 0.0, 1)

        self.assertEqual(s.shape, (constants.EMITTERS_SINGLE,))
        self.assertAlmostEqual(float(np.mean(s)), 0.0, places=12)
        self.assertTrue(np.all(np.abs(s) < 5.0))
        np.testing.assert_allclose(np.diff(s), 10.0 / 21.0, rtol=1e-12)

    def test_double_slit_two_symmetric_groups(self) -> None:
        s = geometry.resolve_secondary_sources(SimulationMode.DOUBLE, 2.0, 10.0, 2)
        groups = geometry.group_sources(s, SimulationMode.DOUBLE)

        self.assertEqual(len(groups), 2)
        self.assertEqual(s.size, 2 * constants.EMITTERS_DOUBLE)
        self.assertAlmostEqual(float(np.mean(groups[0])), -5.0, places=12)
        self.assertAlmostEqual(float(np.mean(groups[1])), 5.0, places=12)
        np.testing.assert_allclose(np.sort(-s), s, rtol=0.0, atol=1e-12)

    def test_grating_apertures(self) -> None:
        s = geometry.resolve_secondary_sources(SimulationMode.GRATING, 2.0, 10.0, 5)
        groups = geometry.group_sources(s, SimulationMode.GRATING)

        self.assertEqual(len(groups), 5)
        centroids = [float(np.mean(g)) for g in groups]
        np.testing.assert_allclose(centroids, [-20.0, -10.0, 0.0, 10.0, 20.0], atol=1e-12)
        np.testing.assert_allclose(np.sort(-s), s, rtol=0.0, atol=1e-12)

    def test_degenerate_inputs_fall_back(self) -> None:
        s = geometry.resolve_secondary_sources(SimulationMode.SINGLE, 0.0, 0.0, 1)
        self.assertEqual(s.size, constants.EMITTERS_SINGLE)
        self.assertGreater(float(np.ptp(s)), 0.0)

        one = geometry.emission_points(3.0, 1.0, 0)
        np.testing.assert_allclose(one, [3.0])

        d = geometry.resolve_secondary_sources(SimulationMode.DOUBLE, 2.0, -1.0, 2)
        groups = geometry.group_sources(d, SimulationMode.DOUBLE)
        self.assertAlmostEqual(float(np.mean(groups[1])), constants.FALLBACK_SLIT_SEPARATION_UM / 2.0)

        g = geometry.resolve_secondary_sources(SimulationMode.GRATING, 2.0, 10.0, 0)
        self.assertEqual(g.size, constants.FALLBACK_SLIT_COUNT * constants.EMITTERS_GRATING)

    def test_scale_applies_to_all_points(self) -> None:
        um = geometry.resolve_secondary_sources("double", 2.0, 10.0, 2)
        px = geometry.resolve_secondary_sources("double", 2.0, 10.0, 2, scale=20.0)
        np.testing.assert_allclose(px, 20.0 * um, rtol=1e-15)

    def test_group_sources_rejects_bad_length(self) -> None:
        with self.assertRaises(ValueError):
            geometry.group_sources(np.zeros(7), SimulationMode.DOUBLE)


class TestFarField(unittest.TestCase):
    def setUp(self) -> None:
        self.single = parameters.default_wave_params(SimulationMode.SINGLE)
        self.double = parameters.default_wave_params(SimulationMode.DOUBLE)
        self.grating = parameters.default_wave_params(SimulationMode.GRATING)
        self.by_mode = {
            SimulationMode.SINGLE: self.single,
            SimulationMode.DOUBLE: self.double,
            SimulationMode.GRATING: self.grating,
        }

    def test_finite_and_non_negative(self) -> None:
        xs = np.concatenate([np.linspace(-0.5, 0.5, 201), [0.0]])
        for mode in ALL_MODES:
            for d in (0.0, 10.0):
                for y in (0.0, 3.0):
                    for x in xs:
                        I = far_field.compute_far_field_intensity(
                            float(x), 500.0, 2.0, d, mode, 1.0, 5, SourcePosition(-20.0, y),
                        )
                        self.assertTrue(math.isfinite(I))
                        self.assertGreaterEqual(I, 0.0)

    def test_degenerate_inputs_stay_finite(self) -> None:
        for mode in ALL_MODES:
            for args in (
                (0.01, 0.0, 2.0, 10.0, mode, 1.0, 5, SourcePosition(-20.0, 0.0)),
                (0.01, 500.0, 0.0, 10.0, mode, 1.0, 5, SourcePosition(-20.0, 0.0)),
                (0.01, 500.0, 2.0, 10.0, mode, 0.0, 5, SourcePosition(-20.0, 0.0)),
                (0.01, 500.0, 2.0, 10.0, mode, 1.0, 0, SourcePosition(0.0, 4.0)),
                (0.01, 500.0, 2.0, 10.0, mode, 1.0, 5, SourcePosition(0.0, 0.0)),
                (0.01, 500.0, 2.0, 10.0, mode, 1.0, 5, None),
            ):
                I = far_field.compute_far_field_intensity(*args)
                self.assertTrue(math.isfinite(I))
                self.assertGreaterEqual(I, 0.0)

    def test_source_position_as_plain_pair(self) -> None:
        xs = np.linspace(-0.2, 0.2, 41)
        for mode in ALL_MODES:
            for y in (0.0, 3.0):
                for x in xs:
                    as_pair = far_field.compute_far_field_intensity(
                        float(x), 500.0, 2.0, 10.0, mode, 1.0, 5, (-20.0, y),
                    )
                    as_point = far_field.compute_far_field_intensity(
                        float(x), 500.0, 2.0, 10.0, mode, 1.0, 5, SourcePosition(-20.0, y),
                    )
                    self.assertEqual(as_pair, as_point)

        self.assertEqual(far_field.incidence_angle((-20.0, 0.0)), 0.0)
        self.assertAlmostEqual(
            far_field.incidence_angle((-20.0, 3.0)),
            math.atan(3.0 / 20.0),
            places=12,
        )

    def test_degenerate_grating_count_uses_two_slits(self) -> None:
        x = 0.025  # alpha ~ pi/2 for d = 10 µm, where two slits cancel
        args = (500.0, 2.0, 10.0, "grating", 1.0)
        src = SourcePosition(-20.0, 0.0)
        n0 = far_field.compute_far_field_intensity(x, *args, 0, src)
        n_neg = far_field.compute_far_field_intensity(x, *args, -3, src)
        n2 = far_field.compute_far_field_intensity(x, *args, 2, src)
        single = far_field.compute_far_field_intensity(x, 500.0, 2.0, 10.0, "single", 1.0, 1, src)

        self.assertEqual(n0, n2)
        self.assertEqual(n_neg, n2)
        self.assertLess(n0, 1e-3)
        self.assertGreater(single, 0.5)

        # near field resolves the same number of apertures
        centers = geometry.aperture_centers("grating", 10.0, 0)
        self.assertEqual(centers.size, constants.FALLBACK_SLIT_COUNT)

    def test_profile_with_degenerate_grating_count(self) -> None:
        p = replace(self.grating, slit_count=0)
        x = np.linspace(-0.1, 0.1, 51)
        np.testing.assert_allclose(
            far_field.far_field_profile(x, p, SimulationMode.GRATING),
            far_field.far_field_profile(x, replace(self.grating, slit_count=2), SimulationMode.GRATING),
            rtol=0.0,
            atol=1e-15,
        )

    def test_on_axis_symmetry(self) -> None:
        xs = np.linspace(0.0, 0.4, 81)
        for mode, p in self.by_mode.items():
            for x in xs:
                self.assertAlmostEqual(_intensity(x, p, mode), _intensity(-x, p, mode), places=12)

    def test_central_maximum_is_one(self) -> None:
        for mode, p in self.by_mode.items():
            self.assertEqual(_intensity(0.0, p, mode), 1.0)
        self.assertEqual(
            far_field.compute_far_field_intensity(0.0, 500.0, 10.0, 10.0, "single", 1.0, 1),
            1.0,
        )

    def test_grating_principal_maxima(self) -> None:
        lam = self.grating.wavelength * constants.NM
        d = self.grating.slit_separation * constants.UM
        L = self.grating.distance_to_screen

        for n in (2, 3, 5, 8):
            p = parameters.make_wave_params(
                "grating", wavelength=500.0, slit_width=2.0, slit_separation=10.0, slit_count=n,
            )
            for m in (-2, -1, 0, 1, 2):
                x = L * math.tan(math.asin(m * lam / d))
                envelope = _intensity(x, p, SimulationMode.SINGLE)
                self.assertAlmostEqual(_intensity(x, p, SimulationMode.GRATING), envelope, places=9)

            for m in range(-3, 4):
                self.assertEqual(
                    far_field._interference_factor(m * math.pi, SimulationMode.GRATING, n), 1.0
                )

    def test_double_converges_to_single_at_zero_separation(self) -> None:
        xs = np.linspace(-0.2, 0.2, 41)
        for d in (0.0, 1e-9):
            for x in xs:
                single = far_field.compute_far_field_intensity(x, 500.0, 2.0, d, "single", 1.0, 1)
                double = far_field.compute_far_field_intensity(x, 500.0, 2.0, d, "double", 1.0, 2)
                self.assertAlmostEqual(single, double, places=9)

    def test_off_axis_source_shifts_central_maximum(self) -> None:
        x = np.linspace(-0.3, 0.3, 3001)
        spacing = x[1] - x[0]

        peaks = []
        for y in (0.0, 1.0, 2.0, 3.0):
            p = parameters.with_source_position(self.single, -20.0, y)
            I = far_field.far_field_profile(x, p, SimulationMode.SINGLE)
            x0 = far_field.central_maximum_position(p)

            self.assertAlmostEqual(x0, y / 20.0, places=12)
            self.assertAlmostEqual(_intensity(x0, p, SimulationMode.SINGLE), 1.0, places=12)
            self.assertLessEqual(abs(x[np.argmax(I)] - x0), spacing)
            peaks.append(x[np.argmax(I)])

        # screen x is oriented opposite to the source y axis; the shift is monotonic
        self.assertTrue(np.all(np.diff(peaks) > 0.0))

    def test_single_slit_scenario(self) -> None:
        p = self.single
        self.assertEqual(_intensity(0.0, p, SimulationMode.SINGLE), 1.0)

        self.assertAlmostEqual(far_field.first_minimum_position(p), 0.05, places=15)
        x_zero = math.tan(math.asin(0.05))
        self.assertLess(_intensity(x_zero, p, SimulationMode.SINGLE), 1e-20)

        x = np.linspace(0.03, 0.07, 4001)
        I = far_field.far_field_profile(x, p, SimulationMode.SINGLE)
        self.assertAlmostEqual(float(x[np.argmin(I)]), 0.05, delta=1e-3)

    def test_double_slit_fringe_spacing(self) -> None:
        p = self.double
        self.assertAlmostEqual(far_field.fringe_spacing(p), 0.05, places=15)

        x = np.linspace(-0.12, 0.12, 24001)
        I = far_field.far_field_profile(x, p, SimulationMode.DOUBLE)
        is_peak = (I[1:-1] > I[:-2]) & (I[1:-1] >= I[2:])
        peaks = x[1:-1][is_peak]

        self.assertGreaterEqual(peaks.size, 3)
        np.testing.assert_allclose(np.diff(peaks), 0.05, atol=2e-3)

        x_dark = math.tan(math.asin(0.025))
        self.assertLess(_intensity(x_dark, p, SimulationMode.DOUBLE), 1e-20)

    def test_grating_scenario(self) -> None:
        p = self.grating
        self.assertEqual(_intensity(0.0, p, SimulationMode.GRATING), 1.0)

        # alpha = pi/5  <=>  sin(theta) = lambda / (5 d) = 0.01
        x_min = math.tan(math.asin(0.01))
        self.assertLess(_intensity(x_min, p, SimulationMode.GRATING), 0.1)

    def test_profile_matches_scalar_formula(self) -> None:
        x = np.linspace(-0.4, 0.4, 401)
        for mode, p in self.by_mode.items():
            for y in (0.0, 2.5):
                q = parameters.with_source_position(p, -20.0, y)
                vec = far_field.far_field_profile(x, q, mode)
                ref = np.array([_intensity(float(xi), q, mode) for xi in x])
                np.testing.assert_allclose(vec, ref, rtol=1e-9, atol=1e-12)

    def test_reference_positions(self) -> None:
        self.assertAlmostEqual(far_field.profile_half_range(self.single), 0.3, places=12)
        self.assertEqual(far_field.fringe_spacing(self.single), math.inf)
        self.assertEqual(far_field.central_maximum_position(self.single), 0.0)
        self.assertEqual(far_field.incidence_angle(None), 0.0)
        self.assertAlmostEqual(far_field.incidence_angle(SourcePosition(0.0, 1.0)), math.pi / 2)


class TestNearField(unittest.TestCase):
    def test_wavenumber_fallback(self) -> None:
        self.assertAlmostEqual(near_field.wavenumber_from_wavelength(25.0), 2 * math.pi / 25.0)
        fallback = 2 * math.pi / constants.FALLBACK_WAVELENGTH_SIM
        self.assertAlmostEqual(near_field.wavenumber_from_wavelength(0.0), fallback)
        self.assertAlmostEqual(near_field.wavenumber_from_wavelength(-3.0), fallback)

    def test_time_phase(self) -> None:
        self.assertEqual(near_field.time_phase(0.0), 0.0)
        self.assertAlmostEqual(near_field.time_phase(100.0), -1.0)

    def test_source_side_is_primary_wave(self) -> None:
        k, t = 0.7, 0.3
        got = near_field.compute_near_field_amplitude((-10.0, 0.0), t, [0.0], k, (-20.0, 0.0))
        expected = constants.PRIMARY_GAIN * math.sin(k * 10.0 - t) / math.sqrt(11.0)
        self.assertAlmostEqual(got, expected, places=14)

    def test_screen_side_carries_incidence_phase(self) -> None:
        k, t = 0.7, 0.3
        # primary -> source: 5, source -> point: 10
        got = near_field.compute_near_field_amplitude((6.0, 8.0), t, [0.0], k, (-3.0, 4.0))
        expected = math.sin(k * 10.0 - t + k * 5.0) / math.sqrt(11.0)
        self.assertAlmostEqual(got, expected, places=14)

    def test_slit_plane_offset(self) -> None:
        k, t = 0.7, 0.3
        a = near_field.compute_near_field_amplitude((6.0, 8.0), t, [0.0], k, (-3.0, 4.0))
        b = near_field.compute_near_field_amplitude(
            (106.0, 58.0), t, [0.0], k, (97.0, 54.0), slit_plane_position=(100.0, 50.0),
        )
        self.assertAlmostEqual(a, b, places=12)

    def test_on_axis_source_gives_mirror_symmetric_field(self) -> None:
        sources = geometry.resolve_secondary_sources("double", 2.0, 10.0, 2, scale=2.0)
        k = near_field.wavenumber_from_wavelength(1.0)
        for y in (3.0, 11.0, 25.0):
            up = near_field.compute_near_field_amplitude((40.0, y), 1.2, sources, k, (-40.0, 0.0))
            down = near_field.compute_near_field_amplitude((40.0, -y), 1.2, sources, k, (-40.0, 0.0))
            self.assertAlmostEqual(up, down, places=10)

    def test_off_axis_source_breaks_symmetry(self) -> None:
        sources = geometry.resolve_secondary_sources("double", 2.0, 10.0, 2, scale=2.0)
        k = near_field.wavenumber_from_wavelength(1.0)
        up = near_field.compute_near_field_amplitude((40.0, 11.0), 1.2, sources, k, (-40.0, 7.0))
        down = near_field.compute_near_field_amplitude((40.0, -11.0), 1.2, sources, k, (-40.0, 7.0))
        self.assertNotAlmostEqual(up, down, places=6)

    def test_continuous_in_time(self) -> None:
        sources = geometry.resolve_secondary_sources("grating", 2.0, 10.0, 5, scale=2.0)
        k = near_field.wavenumber_from_wavelength(10.0)
        dt = 1e-6
        for t in np.linspace(0.0, -5.0, 11):
            a = near_field.compute_near_field_amplitude((30.0, 4.0), t, sources, k, (-40.0, 0.0))
            b = near_field.compute_near_field_amplitude((30.0, 4.0), t - dt, sources, k, (-40.0, 0.0))
            self.assertLessEqual(abs(a - b), sources.size * dt)

    def test_degenerate_inputs_stay_finite(self) -> None:
        cases = [
            ((-20.0, 0.0), [0.0], float("nan")),  # on the primary source
            ((0.0, 0.0), [0.0], 1.0),             # on a secondary source
            ((5.0, 5.0), [], 1.0),                # no sources
        ]
        for point, sources, k in cases:
            a = near_field.compute_near_field_amplitude(point, 0.0, sources, k, (-20.0, 0.0))
            self.assertTrue(math.isfinite(a))
        self.assertEqual(near_field.compute_near_field_amplitude((5.0, 5.0), 0.0, [], 1.0, (-20.0, 0.0)), 0.0)

    def test_scene_mapping(self) -> None:
        scene = near_field.NearFieldScene(width=800, height=400)
        p = parameters.default_wave_params(SimulationMode.DOUBLE)

        self.assertEqual(scene.slit_plane_position, (400.0, 200.0))
        self.assertEqual(scene.primary_source_px(p), (0.0, 200.0))
        self.assertEqual(
            scene.primary_source_px(replace(p, source_position=(-20.0, 3.0))), (0.0, 260.0)
        )
        self.assertAlmostEqual(scene.wavelength_px(p), 10.0)
        self.assertAlmostEqual(scene.wavenumber(p), 2 * math.pi / 10.0)

        x_um, y_um = scene.px_to_physical(*scene.physical_to_px(-12.5, 3.0))
        self.assertAlmostEqual(x_um, -12.5)
        self.assertAlmostEqual(y_um, 3.0)

        src = scene.secondary_sources_px(p, SimulationMode.DOUBLE)
        groups = geometry.group_sources(src, SimulationMode.DOUBLE)
        self.assertAlmostEqual(float(np.mean(groups[1])), 100.0)

    def test_grid_matches_scalar_evaluator(self) -> None:
        scene = near_field.NearFieldScene(width=60, height=40, scale=2.0)
        p = parameters.with_source_position(
            parameters.default_wave_params(SimulationMode.DOUBLE), -10.0, 3.0
        )
        phase = near_field.time_phase(250.0)

        xs, ys, field = near_field.near_field_grid(scene, p, SimulationMode.DOUBLE, phase, stride=3)
        self.assertEqual(xs.shape, (20,))
        self.assertEqual(ys.shape, (14,))
        self.assertEqual(field.shape, (14, 20))
        self.assertTrue(np.all(np.isfinite(field)))

        sources = scene.secondary_sources_px(p, SimulationMode.DOUBLE)
        k = scene.wavenumber(p)
        primary = scene.primary_source_px(p)
        for i, y in enumerate(ys):
            for j, x in enumerate(xs):
                ref = near_field.compute_near_field_amplitude(
                    (x, y), phase, sources, k, primary, scene.slit_plane_position,
                )
                self.assertAlmostEqual(field[i, j], ref, places=10)

    def test_grid_rejects_bad_stride(self) -> None:
        scene = near_field.NearFieldScene(width=60, height=40)
        p = parameters.default_wave_params(SimulationMode.SINGLE)
        with self.assertRaises(ValueError):
            near_field.near_field_grid(scene, p, SimulationMode.SINGLE, 0.0, stride=0)


class TestSimulationPipeline(unittest.TestCase):
    def test_run_intensity_profile_runs_and_shapes(self) -> None:
        cfg = config.custom_simulation_config(n_points=301)
        p = parameters.default_wave_params(SimulationMode.SINGLE)

        x, I = simulation.run_intensity_profile(cfg, p, "single")

        self.assertEqual(x.shape, (301,))
        self.assertEqual(I.shape, (301,))
        self.assertAlmostEqual(x[0], -0.3, places=12)
        self.assertAlmostEqual(x[-1], 0.3, places=12)
        self.assertEqual(I[150], 1.0)
        self.assertTrue(np.all(np.isfinite(I)))

    def test_profile_is_scaled_by_source_intensity(self) -> None:
        cfg = config.custom_simulation_config(n_points=301)
        p = parameters.make_wave_params(
            "double", wavelength=500.0, slit_width=2.0, slit_separation=10.0,
            slit_count=2, intensity=2.0,
        )
        _, I = simulation.run_intensity_profile(cfg, p, SimulationMode.DOUBLE)
        self.assertAlmostEqual(float(I.max()), 2.0, places=12)

    def test_run_field_frame(self) -> None:
        cfg = config.custom_simulation_config(canvas_width=90, canvas_height=60, grid_stride=3)
        p = parameters.default_wave_params(SimulationMode.GRATING)

        frame = simulation.run_field_frame(cfg, p, SimulationMode.GRATING, elapsed_ms=500.0)

        self.assertEqual(frame.field.shape, (20, 30))
        self.assertAlmostEqual(frame.phase, -5.0)
        self.assertTrue(np.all(np.isfinite(frame.field)))

    def test_run_field_animation_advances_phase(self) -> None:
        cfg = config.custom_simulation_config(
            canvas_width=60, canvas_height=30, grid_stride=3, n_frames=3, frame_rate=10.0,
        )
        p = parameters.default_wave_params(SimulationMode.DOUBLE)

        frames = simulation.run_field_animation(cfg, p, SimulationMode.DOUBLE, progress=False)

        self.assertEqual(len(frames), 3)
        np.testing.assert_allclose([f.phase for f in frames], [0.0, -1.0, -2.0], atol=1e-12)
        self.assertFalse(np.allclose(frames[0].field, frames[1].field))

    def test_examples_run(self) -> None:
        x, I = simulation.example_single_slit()
        self.assertEqual(x.shape, (300,))
        self.assertLessEqual(float(I.max()), 1.0)

        x, I = simulation.example_off_axis_grating()
        self.assertTrue(np.all(np.isfinite(I)))

        frame = simulation.example_double_slit_frame()
        self.assertEqual(frame.field.shape, (134, 267))


class TestScanSource(unittest.TestCase):
    def test_scan_tracks_central_maximum(self) -> None:
        cfg = config.custom_simulation_config(n_points=3001)
        p = parameters.default_wave_params(SimulationMode.SINGLE)

        offsets, x_peak, x_theory = scan_source.scan_source_offset(
            cfg, p, SimulationMode.SINGLE, np.array([0.0, 1.0, 2.0]), progress=False,
        )

        np.testing.assert_allclose(x_theory, [0.0, 0.05, 0.1], atol=1e-12)
        np.testing.assert_allclose(x_peak, x_theory, atol=2e-4)
        self.assertTrue(np.all(np.diff(x_peak) > 0.0))

    def test_scan_rejects_empty_offsets(self) -> None:
        cfg = config.default_simulation_config()
        p = parameters.default_wave_params(SimulationMode.SINGLE)
        with self.assertRaises(ValueError):
            scan_source.scan_source_offset(cfg, p, "single", np.array([]), progress=False)


class TestIO(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.x = np.linspace(-0.1, 0.1, 11)
        self.I = np.linspace(0.0, 1.0, 11)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_npz_profile_and_field(self) -> None:
        p = io_slits.save_result_npz(self.tmp / "profile", self.x, self.I, metadata={"mode": SimulationMode.DOUBLE})
        self.assertEqual(p.suffix, ".npz")

        x, values, y, md = io_slits.load_result_npz(p)
        np.testing.assert_array_equal(x, self.x)
        np.testing.assert_array_equal(values, self.I)
        self.assertIsNone(y)
        self.assertEqual(md["mode"], "double")
        self.assertIn("timestamp_utc", md)

        field = np.arange(33, dtype=float).reshape(3, 11)
        p2 = io_slits.save_result_npz(self.tmp / "field.npz", self.x, field, y=np.arange(3.0))
        _, values, y, _ = io_slits.load_result_npz(p2)
        self.assertEqual(values.shape, (3, 11))
        np.testing.assert_array_equal(y, [0.0, 1.0, 2.0])

        with self.assertRaises(FileExistsError):
            io_slits.save_result_npz(p, self.x, self.I)

        with self.assertRaises(ValueError):
            io_slits.save_result_npz(self.tmp / "bad", self.x, self.I[:-1])

    def test_csv_profile(self) -> None:
        p = io_slits.save_profile_csv(self.tmp / "profile.txt", self.x, self.I)
        self.assertEqual(p.suffix, ".csv")

        x, I = io_slits.load_profile_csv(p)
        np.testing.assert_allclose(x, self.x, rtol=0.0, atol=0.0)
        np.testing.assert_allclose(I, self.I, rtol=0.0, atol=0.0)

    def test_metadata_serializes_params(self) -> None:
        params = parameters.default_wave_params(SimulationMode.GRATING)
        cfg = config.default_simulation_config()

        p = io_slits.save_metadata_json(self.tmp / "meta", {"params": params, "config": cfg})
        md = io_slits.load_metadata_json(p)

        self.assertEqual(md["params"]["slit_count"], 5)
        self.assertEqual(md["params"]["source_position"], {"x": -20.0, "y": 0.0})
        self.assertEqual(md["config"]["grid_stride"], 3)

        with self.assertRaises(FileNotFoundError):
            io_slits.load_metadata_json(self.tmp / "missing.json")

    def test_run_bundle(self) -> None:
        saved = io_slits.save_run_bundle(self.tmp / "runs", "double", self.x, self.I, metadata={"note": "t"})
        self.assertEqual(set(saved), {"npz", "csv", "json"})
        for path in saved.values():
            self.assertTrue(path.exists())


class TestPlotting(unittest.TestCase):
    def test_plots_render_without_display(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            x, I = simulation.example_double_slit()
            out = Path(tmp) / "profile.png"
            plotting.plot_intensity_profile(x, I, show=False, save_path=str(out))
            self.assertTrue(out.exists())

            plotting.plot_intensity_profile(
                x, np.column_stack([I, I]), labels=("a", "b"), log_scale=True, show=False,
            )

            cfg = config.custom_simulation_config(canvas_width=60, canvas_height=30)
            frame = simulation.run_field_frame(cfg, parameters.default_wave_params("single"), "single")
            plotting.plot_field_frame(
                frame.xs, frame.ys, frame.field, slit_plane_x=30.0, primary_source=(0.0, 15.0), show=False,
            )

            plotting.plot_source_scan(np.arange(3.0), np.zeros(3), np.zeros(3), show=False)

    def test_plot_rejects_bad_shapes(self) -> None:
        with self.assertRaises(ValueError):
            plotting.plot_intensity_profile(np.zeros(5), np.zeros(4), show=False)

        with self.assertRaises(ValueError):
            plotting.plot_intensity_profile(np.zeros(5), np.zeros(5), x_unit="ft", show=False)

        with self.assertRaises(ValueError):
            plotting.plot_field_frame(np.zeros(3), np.zeros(2), np.zeros((3, 2)), show=False)


class TestLoggingConfig(unittest.TestCase):
    def tearDown(self) -> None:
        self._reset()

    def _reset(self) -> None:
        logger = logging.getLogger(logging_config.LOGGER_NAME)
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.setLevel(logging.NOTSET)

    def test_level_follows_verbose_flag(self) -> None:
        quiet = config.default_simulation_config()
        loud = config.custom_simulation_config(verbose=True)

        self.assertEqual(logging_config.level_for_config(None), logging.INFO)
        self.assertEqual(logging_config.level_for_config(quiet), logging.INFO)
        self.assertEqual(logging_config.level_for_config(loud), logging.DEBUG)

        logger = logging_config.setup_logging(loud)
        self.assertEqual(logger.name, "slits")
        self.assertEqual(logger.level, logging.DEBUG)

        logger = logging_config.setup_logging(loud, level=logging.WARNING)
        self.assertEqual(logger.level, logging.WARNING)

    def test_repeated_setup_replaces_handlers(self) -> None:
        logging_config.setup_logging()
        logger = logging_config.setup_logging()
        self.assertEqual(len(logger.handlers), 1)

    def test_log_file_receives_child_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "run.log"
            logger = logging_config.setup_logging(log_file=str(path))
            self.assertEqual(len(logger.handlers), 2)

            logging.getLogger("slits.simulation").info("profile done")
            for h in logger.handlers:
                h.flush()

            text = path.read_text(encoding="utf-8")
            self.assertIn("slits.simulation - INFO - profile done", text)
            self._reset()


if __name__ == "__main__":
    unittest.main(verbosity=2)
