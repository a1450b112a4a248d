# encoding: utf-8
'''
Errors raised by the adaptive rejection Metropolis sampler.

Each class keeps the numeric code used by the reference ARMS routine so that
failures can be matched against the literature.
'''


class ARMSError(RuntimeError):
    code = None

    def __init__(self, message=''):
        super(ARMSError, self).__init__(message)
        self.message = message
        self.iteration = None
        self.dimension = None

    def locate(self, iteration, dimension):
        '''
        Attach the Gibbs sweep and coordinate at which the failure happened.
        '''
        self.iteration = iteration
        self.dimension = dimension
        return self

    def __str__(self):
        msg = '[%s] %s' % (self.code, self.message)
        if self.dimension is not None:
            msg += ' (iteration %d, dimension %d)' % (self.iteration, self.dimension)
        return msg


class TooFewInitialPoints(ARMSError, ValueError):
    code = 1001


class CapacityTooSmall(ARMSError, ValueError):
    code = 1002


class BoundsViolation(ARMSError, ValueError):
    code = 1003


class UnorderedInitialPoints(ARMSError, ValueError):
    code = 1004


class AllocationFailure(ARMSError):
    code = 1006


class PreviousIterateOutOfBounds(ARMSError, ValueError):
    code = 1007


class InvalidConvexity(ARMSError, ValueError):
    code = 1008


class EnvelopeViolation(ARMSError):
    '''The envelope fails to majorize the log density and Metropolis is off.'''
    code = 2000


class NumericalGuardFailure(ARMSError):
    '''A sampled abscissa fell outside its envelope piece.'''
    code = 1


class GeometryError(ARMSError):
    code = 30
