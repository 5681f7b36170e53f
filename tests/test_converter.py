"""Tests for the in-memory conversion formulas."""

import unittest

import numpy as np

from PBRConvert.converter import TextureConverter, convert_pixel, validate_dimensions
from PBRConvert.core import argb_from_rgba, normalize_rgb, pack_rgb, rgba_from_argb
from PBRConvert.errors import DimensionMismatchError, InvalidConstantError

from conftest import solid_raster


def _random_raster(rng, h, w, gray=False):
    if gray:
        plane = rng.integers(0, 256, size=(h, w), dtype=np.uint8)
        arr = np.empty((h, w, 4), dtype=np.uint8)
        arr[:, :, :3] = plane[:, :, None]
    else:
        arr = rng.integers(0, 256, size=(h, w, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    return arr


class TestValidateDimensions(unittest.TestCase):
    def test_matching_sizes_pass(self):
        a = solid_raster(4, 4, (0, 0, 0))
        validate_dimensions(a, a.copy(), a.copy())

    def test_mismatch_reports_all_sizes(self):
        a = solid_raster(4, 4, (0, 0, 0))
        b = solid_raster(5, 4, (0, 0, 0))
        with self.assertRaises(DimensionMismatchError) as ctx:
            validate_dimensions(a, a, b)
        self.assertEqual(ctx.exception.sizes, [(4, 4), (4, 4), (5, 4)])
        self.assertIn("5x4", str(ctx.exception))

    def test_height_mismatch_detected(self):
        a = solid_raster(4, 4, (0, 0, 0))
        b = solid_raster(4, 3, (0, 0, 0))
        with self.assertRaises(DimensionMismatchError):
            validate_dimensions(b, a, a)


class TestTextureConverter(unittest.TestCase):
    def setUp(self):
        self.conv = TextureConverter(0.28, 0.05)

    def test_defaults(self):
        conv = TextureConverter()
        self.assertEqual(conv.metalness_constant, 0.28)
        self.assertEqual(conv.dielectric_constant, 0.05)

    def test_invalid_constant_rejected(self):
        with self.assertRaises(InvalidConstantError):
            TextureConverter("shiny", 0.05)
        with self.assertRaises(InvalidConstantError):
            TextureConverter(0.28, float("nan"))

    def test_concrete_scenario_separate_gloss(self):
        base = solid_raster(2, 2, (255, 255, 255))
        metal = solid_raster(2, 2, (128, 128, 128))
        rough = solid_raster(2, 2, (0, 0, 0))
        out = self.conv.convert(base, metal, rough, embed_glossiness_in_alpha=False)

        self.assertTrue(np.all(out.diffuse[:, :, :3] == 198))
        self.assertTrue(np.all(out.specular[:, :, :3] == 134))
        self.assertIsNotNone(out.glossiness)
        self.assertTrue(np.all(out.glossiness[:, :, :3] == 255))
        for raster in (out.diffuse, out.specular, out.glossiness):
            self.assertTrue(np.all(raster[:, :, 3] == 255))
        self.assertEqual(out.size, (2, 2))

    def test_concrete_scenario_embedded_gloss(self):
        base = solid_raster(2, 2, (255, 255, 255))
        metal = solid_raster(2, 2, (128, 128, 128))
        rough = solid_raster(2, 2, (0, 0, 0))
        out = self.conv.convert(base, metal, rough, embed_glossiness_in_alpha=True)

        self.assertIsNone(out.glossiness)
        self.assertTrue(np.all(out.specular[:, :, :3] == 134))
        self.assertTrue(np.all(out.specular[:, :, 3] == 255))

    def test_non_metal_keeps_base_and_uses_dielectric_specular(self):
        rng = np.random.default_rng(1)
        base = _random_raster(rng, 8, 8)
        metal = solid_raster(8, 8, (0, 0, 0))
        rough = solid_raster(8, 8, (0, 0, 0))
        diffuse, specular, _ = self.conv.compute(base, metal, rough)
        np.testing.assert_allclose(diffuse, normalize_rgb(base))
        np.testing.assert_allclose(specular, 0.05)

    def test_full_metal_specular_is_base_color(self):
        rng = np.random.default_rng(2)
        base = _random_raster(rng, 8, 8)
        metal = solid_raster(8, 8, (255, 255, 255))
        rough = solid_raster(8, 8, (0, 0, 0))
        diffuse, specular, _ = self.conv.compute(base, metal, rough)
        np.testing.assert_allclose(diffuse, 0.28 * normalize_rgb(base))

        out = self.conv.convert(base, metal, rough)
        np.testing.assert_array_equal(out.specular, pack_rgb(normalize_rgb(base)))

    def test_diffuse_multiplier_is_clamped(self):
        conv = TextureConverter(1.0, 0.05)
        base = solid_raster(1, 1, (200, 100, 50))
        metal = solid_raster(1, 1, (0, 0, 0))
        rough = solid_raster(1, 1, (0, 0, 0))
        diffuse, _, _ = conv.compute(base, metal, rough)
        np.testing.assert_allclose(diffuse, normalize_rgb(base))
        self.assertLessEqual(float(diffuse.max()), 1.0)

    def test_metalness_constant_above_one_keeps_full_base_on_metals(self):
        conv = TextureConverter(1.5, 0.05)
        base = solid_raster(1, 1, (200, 100, 50))
        metal = solid_raster(1, 1, (255, 255, 255))
        rough = solid_raster(1, 1, (0, 0, 0))
        diffuse, _, _ = conv.compute(base, metal, rough)
        np.testing.assert_allclose(diffuse, normalize_rgb(base))

        out = conv.convert(base, metal, rough)
        np.testing.assert_array_equal(out.diffuse, pack_rgb(normalize_rgb(base)))

    def test_out_of_range_constants_rejected(self):
        for mc, dc in ((-0.1, 0.05), (0.28, 1.5), (0.28, -0.01)):
            with self.assertRaises(ValueError, msg=(mc, dc)) as ctx:
                TextureConverter(mc, dc)
            self.assertNotIsInstance(ctx.exception, InvalidConstantError)

    def test_glossiness_is_inverted_roughness(self):
        rough = np.zeros((1, 256, 4), dtype=np.uint8)
        rough[0, :, :3] = np.arange(256, dtype=np.uint8)[:, None]
        rough[:, :, 3] = 255
        base = solid_raster(256, 1, (128, 128, 128))
        metal = solid_raster(256, 1, (0, 0, 0))
        _, _, gloss = self.conv.compute(base, metal, rough)
        np.testing.assert_allclose(gloss, 1 - np.arange(256) / 255.0)

        out = self.conv.convert(base, metal, rough)
        self.assertEqual(int(out.glossiness[0, 0, 0]), 255)
        self.assertEqual(int(out.glossiness[0, 255, 0]), 0)

    def test_separate_glossiness_is_truncated_not_rounded(self):
        rough = np.zeros((1, 256, 4), dtype=np.uint8)
        rough[0, :, :3] = np.arange(256, dtype=np.uint8)[:, None]
        rough[:, :, 3] = 255
        base = solid_raster(256, 1, (128, 128, 128))
        metal = solid_raster(256, 1, (0, 0, 0))
        expected = np.floor((1 - np.arange(256) / 255.0) * 255.0).astype(np.uint8)

        out = self.conv.convert(base, metal, rough)
        for c in range(3):
            np.testing.assert_array_equal(out.glossiness[0, :, c], expected)
        # 1 - 43/255 lands just below 212/255 in float64.
        self.assertEqual(int(out.glossiness[0, 43, 0]), 211)

        embedded = self.conv.convert(base, metal, rough, embed_glossiness_in_alpha=True)
        self.assertEqual(int(embedded.specular[0, 43, 3]), 212)

    def test_embedded_alpha_is_rounded_glossiness(self):
        rough = np.zeros((1, 256, 4), dtype=np.uint8)
        rough[0, :, :3] = np.arange(256, dtype=np.uint8)[:, None]
        rough[:, :, 3] = 255
        base = solid_raster(256, 1, (128, 128, 128))
        metal = solid_raster(256, 1, (0, 0, 0))
        out = self.conv.convert(base, metal, rough, embed_glossiness_in_alpha=True)
        np.testing.assert_array_equal(
            out.specular[0, :, 3], 255 - np.arange(256, dtype=np.uint8)
        )

    def test_embed_flag_only_changes_alpha(self):
        rng = np.random.default_rng(3)
        base = _random_raster(rng, 16, 12)
        metal = _random_raster(rng, 16, 12, gray=True)
        rough = _random_raster(rng, 16, 12, gray=True)
        separate = self.conv.convert(base, metal, rough, False)
        embedded = self.conv.convert(base, metal, rough, True)
        np.testing.assert_array_equal(separate.specular[:, :, :3], embedded.specular[:, :, :3])
        np.testing.assert_array_equal(separate.diffuse, embedded.diffuse)
        self.assertTrue(np.all(separate.specular[:, :, 3] == 255))

    def test_convert_is_deterministic(self):
        rng = np.random.default_rng(4)
        base = _random_raster(rng, 9, 7)
        metal = _random_raster(rng, 9, 7, gray=True)
        rough = _random_raster(rng, 9, 7, gray=True)
        a = self.conv.convert(base, metal, rough)
        b = self.conv.convert(base, metal, rough)
        for name in ("diffuse", "specular", "glossiness"):
            np.testing.assert_array_equal(getattr(a, name), getattr(b, name))

    def test_outputs_do_not_alias_inputs(self):
        base = solid_raster(3, 3, (10, 20, 30))
        metal = solid_raster(3, 3, (0, 0, 0))
        rough = solid_raster(3, 3, (0, 0, 0))
        out = self.conv.convert(base, metal, rough)
        for raster in (out.diffuse, out.specular, out.glossiness):
            for src in (base, metal, rough):
                self.assertFalse(np.shares_memory(raster, src))

    def test_vectorized_matches_per_pixel_reference(self):
        rng = np.random.default_rng(5)
        h, w = 6, 5
        base = _random_raster(rng, h, w)
        metal = _random_raster(rng, h, w, gray=True)
        rough = _random_raster(rng, h, w, gray=True)
        for embed in (False, True):
            out = self.conv.convert(base, metal, rough, embed)
            for y in range(h):
                for x in range(w):
                    d, s, g = convert_pixel(
                        argb_from_rgba(*base[y, x]),
                        argb_from_rgba(*metal[y, x]),
                        argb_from_rgba(*rough[y, x]),
                        0.28, 0.05, embed,
                    )
                    self.assertEqual(rgba_from_argb(d), tuple(int(v) for v in out.diffuse[y, x]))
                    self.assertEqual(rgba_from_argb(s), tuple(int(v) for v in out.specular[y, x]))
                    if embed:
                        self.assertIsNone(g)
                    else:
                        self.assertEqual(
                            rgba_from_argb(g), tuple(int(v) for v in out.glossiness[y, x])
                        )

    def test_non_grayscale_metalness_logs_warning(self):
        base = solid_raster(2, 2, (255, 255, 255))
        metal = solid_raster(2, 2, (255, 0, 0))
        rough = solid_raster(2, 2, (0, 0, 0))
        with self.assertLogs("pbr_convert.converter", level="WARNING") as cm:
            out = self.conv.convert(base, metal, rough)
        self.assertTrue(any("Metalness" in msg for msg in cm.output))
        # Red channel alone drives the result: full metal.
        self.assertTrue(np.all(out.specular[:, :, :3] == 255))

    def test_convert_validates_dimensions(self):
        a = solid_raster(4, 4, (0, 0, 0))
        b = solid_raster(5, 4, (0, 0, 0))
        with self.assertRaises(DimensionMismatchError):
            self.conv.convert(a, a, b)


class TestConvertPixel(unittest.TestCase):
    def test_concrete_pixel(self):
        d, s, g = convert_pixel(
            argb_from_rgba(255, 255, 255),
            argb_from_rgba(128, 128, 128),
            argb_from_rgba(0, 0, 0),
        )
        self.assertEqual(rgba_from_argb(d), (198, 198, 198, 255))
        self.assertEqual(rgba_from_argb(s), (134, 134, 134, 255))
        self.assertEqual(rgba_from_argb(g), (255, 255, 255, 255))

    def test_embedded_pixel_alpha(self):
        _, s, g = convert_pixel(
            argb_from_rgba(255, 255, 255),
            argb_from_rgba(128, 128, 128),
            argb_from_rgba(255, 255, 255),
            embed_glossiness_in_alpha=True,
        )
        self.assertIsNone(g)
        self.assertEqual(rgba_from_argb(s)[3], 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
