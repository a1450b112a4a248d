import math


def normal_lpdf(x):
    # log kernel of the standard normal
    return -0.5 * x * x


def bimodal_lpdf(x):
    # equal mixture of N(-2, 1) and N(2, 1); not log-concave around 0
    return math.log(0.5 * math.exp(-0.5 * (x + 2) ** 2) + 0.5 * math.exp(-0.5 * (x - 2) ** 2))


class CountingDensity(object):
    def __init__(self, f):
        self.f = f
        self.calls = 0

    def __call__(self, x):
        self.calls += 1
        return self.f(x)


def fixed_uniforms(values):
    # cycle through a fixed list of uniforms
    state = {'i': 0}

    def uniform():
        u = values[state['i'] % len(values)]
        state['i'] += 1
        return u
    return uniform
