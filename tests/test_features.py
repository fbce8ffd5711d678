import unittest

import numpy as np

from speech_score.audio.features import NORM_EPSILON, audio_stats, standardize
from speech_score.errors import NonFiniteValueError, NormalizationError
from helpers import sine


class TestStandardize(unittest.TestCase):
    def assertStandardized(self, out: np.ndarray):
        self.assertLess(abs(float(np.mean(out, dtype=np.float64))), 1e-4)
        self.assertLess(abs(float(np.std(out, dtype=np.float64)) - 1.0), 1e-2)

    def test_sine_is_zero_mean_unit_variance(self):
        out = standardize(sine(220, 16000, 1.0, amplitude=0.3).astype(np.float32) + 0.1)
        self.assertEqual(out.dtype, np.float32)
        self.assertStandardized(out)

    def test_random_noise(self):
        rng = np.random.default_rng(7)
        out = standardize(rng.uniform(-0.8, 0.6, size=12345).astype(np.float32))
        self.assertStandardized(out)

    def test_matches_reference_formula(self):
        x = np.array([0.1, -0.2, 0.05, 0.3, -0.1], dtype=np.float32)
        xd = x.astype(np.float64)
        centered = xd - xd.mean()
        expected = centered / np.sqrt(np.mean(centered ** 2) + NORM_EPSILON)
        np.testing.assert_allclose(standardize(x), expected, rtol=1e-6)

    def test_epsilon_keeps_near_silence_finite(self):
        x = np.full(1000, 1e-6, dtype=np.float32)
        x[::2] = -1e-6
        out = standardize(x)
        self.assertTrue(np.all(np.isfinite(out)))
        # variance (1e-12) is swamped by the epsilon, so nothing is amplified to unit variance
        self.assertLess(float(np.max(np.abs(out))), 0.01)

    def test_constant_signal_becomes_zeros(self):
        out = standardize(np.full(64, 0.25, dtype=np.float32))
        np.testing.assert_allclose(out, np.zeros(64), atol=1e-6)

    def test_nan_is_rejected(self):
        x = np.array([0.1, np.nan, 0.2], dtype=np.float32)
        with self.assertRaises(NonFiniteValueError) as ctx:
            standardize(x)
        self.assertIsInstance(ctx.exception, NormalizationError)
        self.assertEqual(ctx.exception.kind, "normalization")
        self.assertEqual(ctx.exception.index, 0)

    def test_infinity_is_rejected(self):
        x = np.array([0.1, 0.2, np.inf], dtype=np.float64)
        with self.assertRaises(NonFiniteValueError):
            standardize(x)

    def test_empty_signal(self):
        out = standardize(np.zeros(0, dtype=np.float32))
        self.assertEqual(len(out), 0)


class TestAudioStats(unittest.TestCase):
    def test_values(self):
        stats = audio_stats(np.array([-1.0, 0.0, 1.0, 2.0]))
        self.assertEqual(stats.min, -1.0)
        self.assertEqual(stats.max, 2.0)
        self.assertAlmostEqual(stats.mean, 0.5)
        self.assertAlmostEqual(stats.variance, 1.25)
        self.assertAlmostEqual(stats.rms, np.sqrt(1.5))

    def test_empty(self):
        stats = audio_stats(np.zeros(0))
        self.assertEqual(stats.rms, 0.0)


if __name__ == '__main__':
    unittest.main()
