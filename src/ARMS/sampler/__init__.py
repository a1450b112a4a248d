from .arms import ARMS, DriverState, sample_one
from .envelope import Envelope, EnvelopePoint
from .errors import (ARMSError, TooFewInitialPoints, CapacityTooSmall, BoundsViolation,
                     UnorderedInitialPoints, AllocationFailure, PreviousIterateOutOfBounds,
                     InvalidConvexity, EnvelopeViolation, NumericalGuardFailure, GeometryError)
