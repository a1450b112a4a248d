# encoding: utf-8
import math
import numbers

import numpy as np

XEPS = 0.00001   # critical relative x-value difference
YEPS = 0.1       # critical y-value difference
EYEPS = 0.001    # critical relative exp(y) difference
YCEIL = 50.      # maximum y avoiding overflow in exp(y)


def expshift(y, y0):
    # exponentiate shifted y without underflow
    if y - y0 > -2.0 * YCEIL:
        return math.exp(y - y0 + YCEIL)
    return 0.0


def logshift(y, y0):
    # inverse of expshift
    if y <= 0.0:
        return -math.inf
    return math.log(y) + y0 - YCEIL


def uniform_source(rng=None):
    '''
    Turn rng into a zero-argument callable returning uniforms on [0, 1).

    rng can be None (fresh numpy generator), an integer seed, anything with a
    random() method (numpy Generator, random.Random) or a plain callable.
    '''
    if rng is None:
        rng = np.random.default_rng()
    elif isinstance(rng, numbers.Integral):
        rng = np.random.default_rng(rng)

    if hasattr(rng, 'random'):
        return lambda: float(rng.random())
    if callable(rng):
        return rng
    raise TypeError('rng must be a seed, a random generator or a callable.')
