# encoding: utf-8
import math

from .envelope import EnvelopePoint
from .errors import NumericalGuardFailure
from .util import YEPS, EYEPS, expshift, logshift


def invert(prob, env):
    '''
    Return a working point at cumulative probability prob under the envelope.

    The point is not part of the chain; its left and right fields index the
    piece it was drawn from.
    '''
    pts = env.points
    total = env.total
    if not total > 0.0:
        raise NumericalGuardFailure('envelope has no mass (total=%r).' % total)

    # find exponential piece containing point implied by prob
    u = prob * total
    qi = env.tail
    while pts[pts[qi].left].cum > u:
        qi = pts[qi].left
    q = pts[qi]
    ql = pts[q.left]

    p = EnvelopePoint(left=q.left, right=qi)
    p.cum = u

    # proportion of way through integral within this piece
    prop = (u - ql.cum) / (q.cum - ql.cum)

    if ql.x == q.x:
        # interval is of zero length
        p.x, p.y, p.ey = q.x, q.y, q.ey
        return p

    xl, xr = ql.x, q.x
    yl, yr = ql.y, q.y
    eyl, eyr = ql.ey, q.ey
    if abs(yr - yl) < YEPS:
        # piece was integrated with the trapezoid rule
        if abs(eyr - eyl) > EYEPS * abs(eyr + eyl):
            p.x = xl + ((xr - xl) / (eyr - eyl)) * (-eyl + math.sqrt((1. - prop) * eyl * eyl + prop * eyr * eyr))
        else:
            p.x = xl + (xr - xl) * prop
        p.ey = ((p.x - xl) / (xr - xl)) * (eyr - eyl) + eyl
        p.y = logshift(p.ey, env.ymax)
    else:
        # piece was integrated exactly
        if eyl > 0.0:
            dy = math.log((1. - prop) * eyl + prop * eyr) - math.log(eyl)
        else:
            dy = logshift((1. - prop) * eyl + prop * eyr, env.ymax) - yl
        p.x = xl + ((xr - xl) / (yr - yl)) * dy
        p.y = ((p.x - xl) / (xr - xl)) * (yr - yl) + yl
        p.ey = expshift(p.y, env.ymax)

    # guard against imprecision yielding point outside interval
    if p.x < xl or p.x > xr:
        raise NumericalGuardFailure('sampled x=%r outside its piece [%r, %r].' % (p.x, xl, xr))
    return p


def sample(env, uniform):
    return invert(uniform(), env)
