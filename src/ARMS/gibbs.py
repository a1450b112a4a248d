# encoding: utf-8
import functools
import logging

import numpy as np
from tqdm import tqdm

from .sampler.arms import ARMS, sample_one
from .sampler.errors import ARMSError
from .sampler.util import uniform_source

logger = logging.getLogger(__name__)


def _as_list(value):
    # scalar parameters apply to every draw; sequences are recycled
    if callable(value) or np.ndim(value) == 0:
        return [value]
    return list(value)


def _as_arg_list(value):
    if np.ndim(value) == 1:
        return list(value)
    return [value]


def _as_initial_list(x_initial):
    if len(x_initial) > 0 and np.ndim(x_initial[0]) > 0:
        return [np.asarray(x, dtype=float) for x in x_initial]
    return [np.asarray(x_initial, dtype=float)]


def default_initial(lower, upper, n_initial=10):
    '''
    n_initial equally spaced points strictly inside (lower, upper).
    '''
    return lower + np.arange(1, n_initial + 1) * (upper - lower) / (n_initial + 1)


def arms(n_samples, log_pdf, lower, upper, x_initial=None, n_initial=10, convex=0.0,
         max_points=100, metropolis=False, x_previous=None, include_n_evaluations=False,
         rng=None, **fargs):
    '''
    Draw n_samples with Adaptive Rejection Metropolis Sampling.

    log_pdf, lower, upper, x_initial, convex, max_points, metropolis and
    x_previous may each be given per draw as a sequence, recycled by
    position; x_initial is then a sequence of vectors. With all of them
    scalar a single envelope serves every draw. fargs are passed to log_pdf
    as keyword arguments; a one-dimensional sequence is recycled by
    position like the other per draw parameters.
    '''
    uniform = uniform_source(rng)
    log_pdfs = _as_list(log_pdf)
    lowers = _as_list(lower)
    uppers = _as_list(upper)
    initials = _as_initial_list(x_initial) if x_initial is not None else None
    convexes = _as_list(convex)
    max_pointses = _as_list(max_points)
    metropolises = _as_list(metropolis)
    previouses = _as_list(x_previous)
    arg_lists = dict((k, _as_arg_list(v)) for k, v in fargs.items())

    def setting(i):
        lo = lowers[i % len(lowers)]
        hi = uppers[i % len(uppers)]
        if initials is None:
            xi = default_initial(lo, hi, n_initial)
        else:
            xi = initials[i % len(initials)]
        f = log_pdfs[i % len(log_pdfs)]
        if arg_lists:
            kwargs = dict((k, v[i % len(v)]) for k, v in arg_lists.items())
            f = functools.partial(f, **kwargs)
        return dict(log_pdf=f, lower=lo, upper=hi, x_initial=xi,
                    convex=convexes[i % len(convexes)],
                    max_points=max_pointses[i % len(max_pointses)],
                    metropolis=metropolises[i % len(metropolises)],
                    x_previous=previouses[i % len(previouses)],
                    rng=uniform)

    lists = [log_pdfs, lowers, uppers, convexes, max_pointses, metropolises, previouses]
    lists.extend(arg_lists.values())
    if max(len(x) for x in lists) == 1 and (initials is None or len(initials) == 1):
        # only one distribution to sample from
        sampler = ARMS(**setting(0))
        samples = sampler.draw(n_samples)
        n_evaluations = sampler.n_evaluations
    else:
        samples = np.zeros(n_samples)
        n_evaluations = 0
        for i in range(n_samples):
            samples[i], neval = sample_one(**setting(i))
            n_evaluations += neval

    if include_n_evaluations:
        return {'n_evaluations': n_evaluations, 'samples': samples}
    return samples


def arms_gibbs(n_samples, previous, log_pdf, lower, upper, initial=None, n_initial=10,
               convex=0.0, max_points=100, metropolis=False, include_n_evaluations=False,
               rng=None, show_progress=False):
    '''
    Gibbs sampler drawing each coordinate in turn with ARMS.

    log_pdf(state, p) returns the log density of coordinate p given the rest
    of state; state[p] holds the value being tried. lower, upper, initial,
    convex, max_points and metropolis are per coordinate, recycled by
    position. The current value of each coordinate is used as the previous
    Markov chain iterate for the Metropolis step.

    Returns an (n_samples, dimension) array, or a dict with samples and
    n_evaluations. The run stops at the first failure, with the sweep and
    coordinate recorded on the raised error.
    '''
    uniform = uniform_source(rng)
    current = np.array(previous, dtype=float).ravel()
    n_dim = current.shape[0]

    lowers = _as_list(lower)
    uppers = _as_list(upper)
    initials = _as_initial_list(initial) if initial is not None else None
    convexes = _as_list(convex)
    max_pointses = _as_list(max_points)
    metropolises = _as_list(metropolis)

    samples = np.zeros((n_samples, n_dim))
    n_evaluations = 0
    logger.info('Gibbs sampling %d sweeps over %d dimensions.', n_samples, n_dim)
    for i in tqdm(range(n_samples), disable=not show_progress):
        for p in range(n_dim):
            lo = lowers[p % len(lowers)]
            hi = uppers[p % len(uppers)]
            if initials is None:
                xi = default_initial(lo, hi, n_initial)
            else:
                xi = initials[p % len(initials)]

            def f(x):
                current[p] = x
                return log_pdf(current, p)

            try:
                x, neval = sample_one(f, lo, hi, xi,
                                      convex=convexes[p % len(convexes)],
                                      max_points=max_pointses[p % len(max_pointses)],
                                      metropolis=metropolises[p % len(metropolises)],
                                      x_previous=current[p],
                                      rng=uniform)
            except ARMSError as err:
                err.locate(i, p)
                logger.error('Gibbs sampling stopped: %s', err)
                raise
            current[p] = x
            samples[i, p] = x
            n_evaluations += neval

    logger.info('Gibbs sampling finished after %d log density evaluations.', n_evaluations)
    if include_n_evaluations:
        return {'n_evaluations': n_evaluations, 'samples': samples}
    return samples
