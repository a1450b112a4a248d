import logging

from .gibbs import arms, arms_gibbs
from .sampler import (ARMS, DriverState, sample_one, Envelope, EnvelopePoint,
                      ARMSError, TooFewInitialPoints, CapacityTooSmall, BoundsViolation,
                      UnorderedInitialPoints, AllocationFailure, PreviousIterateOutOfBounds,
                      InvalidConvexity, EnvelopeViolation, NumericalGuardFailure, GeometryError)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'
