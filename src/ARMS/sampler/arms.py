# encoding: utf-8
import logging
from enum import Enum

import numpy as np

from .acceptance import Decision, MetropolisState, classify
from .envelope import Envelope, validate_initial
from .errors import ARMSError, PreviousIterateOutOfBounds
from .inversion import sample
from .util import uniform_source
"""
class ARMS

Adaptive Rejection Metropolis Sampling of Gilks, Best and Tan (1995), for a
single univariate log density on a bounded interval.
"""

logger = logging.getLogger(__name__)


class DriverState(Enum):
    INITIALIZING = 'initializing'
    AWAITING_CANDIDATE = 'awaiting_candidate'
    EVALUATING = 'evaluating'
    ACCEPTED = 'accepted'
    FAILED = 'failed'


class ARMS(object):
    '''
    This class implements Adaptive Rejection Metropolis Sampling.
    The log density need not be concave; when it is not, turn metropolis on
    and pass the previous iterate of the Markov chain as x_previous.
    '''

    def __init__(self, log_pdf, lower, upper, x_initial, convex=0.0, max_points=100,
                 metropolis=False, x_previous=None, rng=None):
        '''
        Parameters
        ==========
        log_pdf: function that computes log(f(x)) for given x, where f(x) is
                 proportional to the density we want to sample from
        lower, upper: bounds of the support
        x_initial: ordered vector of at least 3 starting points strictly
                   inside (lower, upper), used to build the envelope
        convex: adjustment for convexity, >= 0
        max_points: maximum number of points defining the envelope
        metropolis: whether to follow rejection with a Metropolis step
        x_previous: previous Markov chain iterate, required with metropolis
        rng: numpy Generator, seed, or callable returning uniforms on [0, 1)
        '''
        self.state = DriverState.INITIALIZING
        self.uniform = uniform_source(rng)

        try:
            validate_initial(lower, upper, x_initial, max_points, convex)
            if metropolis and (x_previous is None or not (lower <= x_previous <= upper)):
                raise PreviousIterateOutOfBounds('previous iterate %r is outside [%g, %g].'
                                                 % (x_previous, lower, upper))
            self.env = Envelope(log_pdf, lower, upper, x_initial, max_points=max_points,
                                convex=convex, metropolis=metropolis)
            self.metrop = MetropolisState(on=bool(metropolis))
            if self.metrop.on:
                self.metrop.xprev = float(x_previous)
                self.metrop.yprev = self.env.evaluate(self.metrop.xprev)
        except ARMSError:
            self.state = DriverState.FAILED
            raise

        self.state = DriverState.AWAITING_CANDIDATE

    @property
    def n_evaluations(self):
        return self.env.n_evaluations

    def draw(self, N=1):
        '''
        Draw N samples, refining the envelope along the way.
        '''
        samples = np.zeros(N)
        n = 0
        while n < N:
            self.state = DriverState.AWAITING_CANDIDATE
            try:
                p = sample(self.env, self.uniform)
                self.state = DriverState.EVALUATING
                decision = classify(self.env, p, self.metrop, self.uniform)
            except ARMSError:
                self.state = DriverState.FAILED
                raise
            if decision is Decision.ACCEPT:
                samples[n] = p.x
                n += 1
                self.state = DriverState.ACCEPTED

        logger.debug('Drew %d samples with %d log density evaluations and %d envelope points.',
                     N, self.env.n_evaluations, self.env.n_points)
        return samples


def sample_one(log_pdf, lower, upper, x_initial, convex=0.0, max_points=100,
               metropolis=False, x_previous=None, rng=None):
    '''
    Draw a single value; returns (value, number of log density evaluations).
    '''
    sampler = ARMS(log_pdf, lower, upper, x_initial, convex=convex, max_points=max_points,
                   metropolis=metropolis, x_previous=x_previous, rng=rng)
    value = sampler.draw(1)[0]
    return float(value), sampler.n_evaluations
