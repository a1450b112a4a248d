import math
import unittest

import numpy as np

import os, sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from helpers import normal_lpdf, bimodal_lpdf, CountingDensity, fixed_uniforms
from ARMS.sampler.arms import ARMS, DriverState, sample_one
from ARMS.sampler.acceptance import Decision, MetropolisState, classify
from ARMS.sampler.envelope import EnvelopePoint
from ARMS.sampler.errors import (TooFewInitialPoints, PreviousIterateOutOfBounds,
                                 EnvelopeViolation)


class TestTruncatedNormal(unittest.TestCase):
    def setUp(self):
        self.sampler = ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], max_points=100,
                            rng=np.random.default_rng(2024))
        self.samples = self.sampler.draw(1000)

    def test_moments(self):
        self.assertEqual(self.samples.shape, (1000,))
        self.assertTrue(np.all(self.samples >= -3.0))
        self.assertTrue(np.all(self.samples <= 3.0))
        self.assertLess(abs(self.samples.mean()), 0.1)
        self.assertLess(abs(self.samples.std() - 0.9866), 0.1)

    def test_bookkeeping(self):
        self.assertEqual(self.sampler.state, DriverState.ACCEPTED)
        self.assertGreater(self.sampler.n_evaluations, 3)
        self.assertLessEqual(len(self.sampler.env), 100)
        # squeezing saves evaluations
        self.assertLess(self.sampler.n_evaluations, 1000)

    def test_minimum_capacity(self):
        f = CountingDensity(normal_lpdf)
        sampler = ARMS(f, -3.0, 3.0, [-1.0, 0.0, 1.0], max_points=7, rng=7)
        samples = sampler.draw(200)
        self.assertEqual(len(sampler.env), 7)
        self.assertGreater(f.calls, 3)
        self.assertEqual(f.calls, sampler.n_evaluations)
        self.assertTrue(np.all(np.abs(samples) <= 3.0))


class TestReproducibility(unittest.TestCase):
    def test_seeded_generator(self):
        a = ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], rng=np.random.default_rng(7))
        b = ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], rng=np.random.default_rng(7))
        np.testing.assert_array_equal(a.draw(50), b.draw(50))
        self.assertEqual(a.n_evaluations, b.n_evaluations)

    def test_fixed_uniforms(self):
        us = [0.13, 0.71, 0.42, 0.95, 0.08, 0.57, 0.33, 0.86]
        results = [sample_one(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], max_points=20,
                              rng=fixed_uniforms(us)) for _ in range(3)]
        self.assertEqual(results[0], results[1])
        self.assertEqual(results[1], results[2])
        value, n_evaluations = results[0]
        self.assertTrue(-3.0 <= value <= 3.0)
        self.assertGreaterEqual(n_evaluations, 3)


class TestInputErrors(unittest.TestCase):
    def test_too_few_points_before_evaluation(self):
        f = CountingDensity(normal_lpdf)
        with self.assertRaises(TooFewInitialPoints):
            sample_one(f, -3.0, 3.0, [-1.0, 1.0])
        self.assertEqual(f.calls, 0)

    def test_previous_out_of_bounds(self):
        f = CountingDensity(normal_lpdf)
        with self.assertRaises(PreviousIterateOutOfBounds) as cm:
            sample_one(f, -3.0, 3.0, [-1.0, 0.0, 1.0], metropolis=True, x_previous=5.0)
        self.assertEqual(cm.exception.code, 1007)
        self.assertEqual(f.calls, 0)

    def test_construction_error_reported_first(self):
        f = CountingDensity(normal_lpdf)
        with self.assertRaises(TooFewInitialPoints):
            sample_one(f, -3.0, 3.0, [-1.0, 1.0], metropolis=True, x_previous=5.0)
        self.assertEqual(f.calls, 0)

    def test_previous_missing(self):
        with self.assertRaises(PreviousIterateOutOfBounds):
            ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], metropolis=True)

    def test_previous_ignored_without_metropolis(self):
        value, _ = sample_one(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], x_previous=5.0, rng=1)
        self.assertTrue(-3.0 <= value <= 3.0)


class TestMetropolis(unittest.TestCase):
    def test_bimodal_requires_metropolis(self):
        with self.assertRaises(EnvelopeViolation):
            ARMS(bimodal_lpdf, -6.0, 6.0, [-1.0, 0.0, 1.0], rng=3)

    def test_bimodal_with_metropolis(self):
        f = CountingDensity(bimodal_lpdf)
        sampler = ARMS(f, -6.0, 6.0, [-1.0, 0.0, 1.0], metropolis=True, x_previous=0.0,
                       rng=np.random.default_rng(3))
        # three initial points and the previous iterate
        self.assertEqual(sampler.n_evaluations, 4)
        samples = sampler.draw(300)
        self.assertTrue(np.all(np.isfinite(samples)))
        self.assertTrue(np.all(np.abs(samples) <= 6.0))
        self.assertEqual(f.calls, sampler.n_evaluations)

    def test_bimodal_moments(self):
        # equal mixture of N(-2, 1) and N(2, 1): mean 0, variance 5
        sampler = ARMS(bimodal_lpdf, -8.0, 8.0, [-4.0, -1.0, 1.0, 4.0], metropolis=True,
                       x_previous=0.0, rng=np.random.default_rng(21))
        samples = sampler.draw(5000)
        self.assertLess(abs(samples.mean()), 0.25)
        self.assertTrue(4.5 < samples.var() < 5.5)
        self.assertTrue(0.4 < np.mean(samples > 0.0) < 0.6)

    def test_bimodal_chain(self):
        # one draw per step, each fed back as the previous iterate
        gen = np.random.default_rng(22)
        x = 0.0
        chain = np.zeros(3000)
        for i in range(len(chain)):
            x, _ = sample_one(bimodal_lpdf, -8.0, 8.0, [-4.0, -1.0, 1.0, 4.0], metropolis=True,
                              x_previous=x, rng=gen)
            chain[i] = x
        self.assertTrue(np.all(np.abs(chain) <= 8.0))
        self.assertLess(abs(chain.mean()), 0.3)
        self.assertTrue(4.3 < chain.var() < 5.7)
        self.assertTrue(0.4 < np.mean(chain > 0.0) < 0.6)

    def test_convexity_adjustment(self):
        sampler = ARMS(bimodal_lpdf, -6.0, 6.0, [-3.0, -1.0, 0.0, 1.0, 3.0], convex=1.0,
                       metropolis=True, x_previous=2.0, rng=11)
        samples = sampler.draw(100)
        self.assertTrue(np.all(np.abs(samples) <= 6.0))

    def test_metropolis_stays_at_previous(self):
        sampler = ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], metropolis=True,
                       x_previous=0.5, rng=1)
        env = sampler.env
        # the envelope sits below the density at xprev, so the move is unlikely
        metrop = MetropolisState(on=True, xprev=0.5, yprev=5.0)
        p = EnvelopePoint(x=-0.5, y=0.25, left=2, right=3)
        p.ey = math.exp(0.25 - env.ymax + 50.)
        decision = classify(env, p, metrop, fixed_uniforms([1e-6, 1.0]))
        self.assertIs(decision, Decision.ACCEPT)
        self.assertEqual(p.x, 0.5)
        self.assertEqual(metrop.xprev, 0.5)

    def test_metropolis_moves(self):
        sampler = ARMS(normal_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], metropolis=True,
                       x_previous=0.5, rng=1)
        env = sampler.env
        metrop = MetropolisState(on=True, xprev=0.5, yprev=normal_lpdf(0.5))
        p = EnvelopePoint(x=-0.5, y=0.25, left=2, right=3)
        p.ey = math.exp(0.25 - env.ymax + 50.)
        decision = classify(env, p, metrop, fixed_uniforms([1e-6, 0.0]))
        self.assertIs(decision, Decision.ACCEPT)
        self.assertEqual(p.x, -0.5)
        self.assertEqual(metrop.xprev, -0.5)
        self.assertEqual(metrop.yprev, normal_lpdf(-0.5))


class TestFailureState(unittest.TestCase):
    def test_violation_during_update(self):
        calls = {'n': 0}

        def changing_lpdf(x):
            # concave while the envelope is built, then a spike
            calls['n'] += 1
            if calls['n'] <= 3:
                return normal_lpdf(x)
            return 100.0

        sampler = ARMS(changing_lpdf, -3.0, 3.0, [-1.0, 0.0, 1.0], rng=5)
        with self.assertRaises(EnvelopeViolation):
            sampler.draw(1000)
        self.assertEqual(sampler.state, DriverState.FAILED)


if __name__ == '__main__':
    unittest.main()
