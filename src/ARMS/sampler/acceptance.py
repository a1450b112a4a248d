# encoding: utf-8
import logging
import math
from enum import Enum

from .util import YCEIL, expshift, logshift

logger = logging.getLogger(__name__)


class Decision(Enum):
    ACCEPT = 1
    REJECT = 0


class MetropolisState(object):
    '''
    Previous Markov chain iterate and its log density, for the Metropolis step.
    '''

    def __init__(self, on=False, xprev=None, yprev=None):
        self.on = on
        self.xprev = xprev
        self.yprev = yprev


def classify(env, p, metrop, uniform):
    '''
    Perform squeezing, rejection and (perhaps) Metropolis tests on working point p.

    On a Metropolis rejection p is overwritten with the previous iterate, so the
    accepted value is always p.x. Envelope violations propagate as exceptions.
    '''
    pts = env.points

    # for rejection test
    u = uniform() * p.ey
    y = logshift(u, env.ymax)

    pl, pr = pts[p.left], pts[p.right]
    if not metrop.on and pl.left is not None and pr.right is not None:
        # squeezing test against chord between nearest evaluated points
        ql = pl if pl.f else pts[pl.left]
        qr = pr if pr.f else pts[pr.right]
        ysqueez = (qr.y * (p.x - ql.x) + ql.y * (qr.x - p.x)) / (qr.x - ql.x)
        if y <= ysqueez:
            return Decision.ACCEPT

    ynew = env.evaluate(p.x)

    if not metrop.on or y >= ynew:
        p.y = ynew
        p.ey = expshift(p.y, env.ymax)
        p.f = True
        env.update(p)
        if y >= ynew:
            return Decision.REJECT
        return Decision.ACCEPT

    # metropolis step
    yold = metrop.yprev
    li, ri, zold = env.height(metrop.xprev)
    znew = p.y
    zold = min(zold, yold)
    znew = min(znew, ynew)
    w = min(ynew - znew - yold + zold, 0.0)
    w = math.exp(w) if w > -YCEIL else 0.0

    if uniform() > w:
        # stay at the previous iterate
        logger.debug('Metropolis step rejected x=%g, staying at %g.', p.x, metrop.xprev)
        p.x = metrop.xprev
        p.y = metrop.yprev
        p.ey = expshift(p.y, env.ymax)
        p.f = True
        p.left, p.right = li, ri
    else:
        metrop.xprev = p.x
        metrop.yprev = ynew
    return Decision.ACCEPT
