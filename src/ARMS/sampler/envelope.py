# encoding: utf-8
import logging

from .errors import (TooFewInitialPoints, CapacityTooSmall, BoundsViolation,
                     UnorderedInitialPoints, InvalidConvexity, AllocationFailure,
                     EnvelopeViolation, GeometryError)
from .util import XEPS, YEPS, expshift

logger = logging.getLogger(__name__)


def validate_initial(lower, upper, x_initial, max_points, convex):
    '''
    Check the envelope inputs without touching the log density; returns the
    initial points as floats.
    '''
    x_initial = [float(x) for x in x_initial]
    ninit = len(x_initial)
    if ninit < 3:
        raise TooFewInitialPoints('at least 3 initial points are required, got %d.' % ninit)

    mpoint = 2 * ninit + 1
    if max_points < mpoint:
        raise CapacityTooSmall('max_points=%s cannot hold %d initial points; need at least %d.'
                               % (max_points, ninit, mpoint))

    if x_initial[0] <= lower or x_initial[-1] >= upper:
        raise BoundsViolation('initial points must lie strictly inside (%g, %g).' % (lower, upper))

    for i in range(1, ninit):
        if x_initial[i] <= x_initial[i - 1]:
            raise UnorderedInitialPoints('initial points are not strictly increasing at position %d.' % i)

    if convex < 0.0:
        raise InvalidConvexity('convexity parameter must be non-negative, got %g.' % convex)

    if int(max_points) != max_points:
        raise AllocationFailure('max_points must be a whole number, got %r.' % (max_points,))
    return x_initial


class EnvelopePoint(object):
    '''
    A point in the x,y plane. left and right are indices of the neighbouring
    points in the envelope arena, None at either end of the chain.
    '''
    __slots__ = ('x', 'y', 'ey', 'cum', 'f', 'left', 'right')

    def __init__(self, x=0.0, y=0.0, f=False, left=None, right=None):
        self.x = x
        self.y = y
        self.ey = 0.0    # exp(y-ymax+YCEIL)
        self.cum = 0.0   # integral up to x of rejection envelope
        self.f = f       # is y an evaluated point of log-density
        self.left = left
        self.right = right

    def __repr__(self):
        return 'EnvelopePoint(x=%g, y=%g, f=%s)' % (self.x, self.y, self.f)


class Envelope(object):
    '''
    Piecewise exponential rejection envelope over a log density.

    The envelope is a chain of points stored in a fixed-size arena. Evaluated
    points alternate with intersection points, and the chain is closed by two
    non-evaluated boundary points at lower and upper. The arena never grows:
    once max_points are in use, new evaluations are no longer incorporated.
    '''

    def __init__(self, log_pdf, lower, upper, x_initial, max_points=100, convex=0.0, metropolis=False):
        '''
        Parameters
        ==========
        log_pdf: function that computes log(f(x)) up to an additive constant
        lower, upper: bounds of the support
        x_initial: strictly increasing starting abscissae inside (lower, upper)
        max_points: maximum number of points allowed in the envelope
        convex: adjustment for convexity, only used when metropolis is on
        metropolis: tolerate envelope violations, to be corrected by a
                    Metropolis step
        '''
        x_initial = validate_initial(lower, upper, x_initial, max_points, convex)
        ninit = len(x_initial)
        mpoint = 2 * ninit + 1

        self.log_pdf = log_pdf
        self.lower = float(lower)
        self.upper = float(upper)
        self.convex = float(convex)
        self.metropolis = bool(metropolis)
        self.max_points = max_points
        self.n_evaluations = 0
        self.ymax = 0.0
        self._full_logged = False

        self.points = self._allocate(max_points)

        # lay out boundary, point, intersection, ..., point, boundary
        pts = self.points
        k = 0
        for j in range(mpoint):
            q = pts[j]
            q.left = j - 1 if j > 0 else None
            q.right = j + 1 if j < mpoint - 1 else None
            if j == 0:
                q.x = self.lower
                q.f = False
            elif j == mpoint - 1:
                q.x = self.upper
                q.f = False
            elif j % 2:
                q.x = x_initial[k]
                q.y = self.evaluate(q.x)
                q.f = True
                k += 1
            else:
                q.f = False
        self.head = 0
        self.tail = mpoint - 1
        self.n_points = mpoint

        for j in range(0, mpoint, 2):
            self.meet(j)
        self.cumulate()

        logger.debug('Envelope built on (%g, %g) with %d initial points, capacity %d.',
                     self.lower, self.upper, ninit, max_points)

    @staticmethod
    def _allocate(max_points):
        try:
            return [EnvelopePoint() for _ in range(int(max_points))]
        except MemoryError as err:
            raise AllocationFailure('insufficient memory for %d envelope points.' % max_points) from err

    def __len__(self):
        return self.n_points

    @property
    def total(self):
        # unnormalised mass under the exponentiated envelope
        return self.points[self.tail].cum

    def evaluate(self, x):
        '''
        Evaluate the log density and count the evaluation.
        '''
        y = float(self.log_pdf(x))
        self.n_evaluations += 1
        return y

    def chain(self):
        i = self.head
        while i is not None:
            yield i
            i = self.points[i].right

    def _hop(self, i, steps, side):
        for _ in range(steps):
            if i is None:
                return None
            i = getattr(self.points[i], side)
        return i

    def meet(self, i):
        '''
        Find where the two chords either side of intersection point i cross.
        '''
        pts = self.points
        q = pts[i]
        if q.f:
            raise GeometryError('point %d is evaluated, not an intersection.' % i)

        ql = pts[q.left] if q.left is not None else None
        qr = pts[q.right] if q.right is not None else None
        gl = gr = grl = dl = dr = 0.0

        far_left = self._hop(i, 3, 'left')
        il = ql is not None and far_left is not None
        if il:
            # chord gradient at left end of interval
            qll = pts[far_left]
            gl = (ql.y - qll.y) / (ql.x - qll.x)

        far_right = self._hop(i, 3, 'right')
        ir = qr is not None and far_right is not None
        if ir:
            qrr = pts[far_right]
            gr = (qr.y - qrr.y) / (qr.x - qrr.x)

        irl = ql is not None and qr is not None
        if irl:
            grl = (qr.y - ql.y) / (qr.x - ql.x)

        if irl and il and gl < grl:
            if not self.metropolis:
                raise EnvelopeViolation('log density is not concave to the left of x=%g.' % ql.x)
            gl = gl + (1.0 + self.convex) * (grl - gl)

        if irl and ir and gr > grl:
            if not self.metropolis:
                raise EnvelopeViolation('log density is not concave to the right of x=%g.' % qr.x)
            gr = gr + (1.0 + self.convex) * (grl - gr)

        if il and irl:
            dr = max((gl - grl) * (qr.x - ql.x), YEPS)
        if ir and irl:
            dl = max((grl - gr) * (qr.x - ql.x), YEPS)

        if il and ir and irl:
            q.x = (dl * qr.x + dr * ql.x) / (dl + dr)
            q.y = (dl * qr.y + dr * ql.y + dl * dr) / (dl + dr)
        elif il and irl:
            q.x = qr.x
            q.y = qr.y + dr
        elif ir and irl:
            q.x = ql.x
            q.y = ql.y + dl
        elif il:
            # right hand bound
            q.y = ql.y + gl * (q.x - ql.x)
        elif ir:
            # left hand bound
            q.y = qr.y - gr * (qr.x - q.x)
        else:
            raise GeometryError('no chord gradient on either side of point %d.' % i)

        if (ql is not None and q.x < ql.x) or (qr is not None and q.x > qr.x):
            raise GeometryError('intersection x=%g fell outside its interval.' % q.x)

    def area(self, i):
        # integral of the exponentiated envelope over the piece left of point i
        q = self.points[i]
        if q.left is None:
            raise GeometryError('point %d is the leftmost point of the envelope.' % i)
        ql = self.points[q.left]
        if ql.x == q.x:
            return 0.0
        if abs(q.y - ql.y) < YEPS:
            return 0.5 * (q.ey + ql.ey) * (q.x - ql.x)
        return ((q.ey - ql.ey) / (q.y - ql.y)) * (q.x - ql.x)

    def cumulate(self):
        '''
        Exponentiate and integrate the envelope.
        '''
        pts = self.points
        chain = list(self.chain())

        self.ymax = max(pts[j].y for j in chain)
        for j in chain:
            pts[j].ey = expshift(pts[j].y, self.ymax)

        pts[chain[0]].cum = 0.0
        for prev, j in zip(chain, chain[1:]):
            pts[j].cum = pts[prev].cum + self.area(j)

    def height(self, x):
        '''
        Height of the envelope at x, with the indices of the enclosing piece.
        '''
        pts = self.points
        li = self.head
        while pts[pts[li].right].x < x:
            li = pts[li].right
        ri = pts[li].right
        ql, qr = pts[li], pts[ri]
        if qr.x == ql.x:
            return li, ri, ql.y
        w = (x - ql.x) / (qr.x - ql.x)
        return li, ri, ql.y + w * (qr.y - ql.y)

    def update(self, p):
        '''
        Incorporate the freshly evaluated working point p into the envelope.

        Returns False when the point was ignored because the arena is full.
        '''
        if not p.f:
            return False
        if self.n_points > self.max_points - 2:
            if not self._full_logged:
                logger.debug('Envelope is full at %d points; further evaluations are not incorporated.',
                             self.n_points)
                self._full_logged = True
            return False

        pts = self.points
        pl, pr = pts[p.left], pts[p.right]
        if pl.f == pr.f:
            raise GeometryError('working point at x=%g is not next to exactly one evaluated point.' % p.x)

        qi = self.n_points
        mi = qi + 1
        self.n_points += 2
        q = pts[qi]
        q.x, q.y, q.f = p.x, p.y, True
        m = pts[mi]
        m.f = False

        if pl.f:
            # new intersection goes between p.left and q
            m.left, m.right = p.left, qi
            q.left, q.right = mi, p.right
            pl.right = mi
            pr.left = qi
        else:
            # new intersection goes between q and p.right
            m.left, m.right = qi, p.right
            q.left, q.right = p.left, mi
            pr.left = mi
            pl.right = qi

        # keep q away from the ends of its interval
        ql = pts[self._hop(qi, 2, 'left') if pts[q.left].left is not None else q.left]
        qr = pts[self._hop(qi, 2, 'right') if pts[q.right].right is not None else q.right]
        lo = (1. - XEPS) * ql.x + XEPS * qr.x
        hi = XEPS * ql.x + (1. - XEPS) * qr.x
        if q.x < lo:
            q.x = lo
            q.y = self.evaluate(q.x)
        elif q.x > hi:
            q.x = hi
            q.y = self.evaluate(q.x)

        # revise intersection points
        self.meet(q.left)
        self.meet(q.right)
        if pts[q.left].left is not None:
            self.meet(self._hop(qi, 3, 'left'))
        if pts[q.right].right is not None:
            self.meet(self._hop(qi, 3, 'right'))

        self.cumulate()
        return True
