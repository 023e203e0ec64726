class DiscretizationError(ValueError):
    """Base class for the conditions under which no categorizer can be built.
    """


class InsufficientDataError(DiscretizationError):
    """Raised when there are no observations to discretize.
    """


class InvalidSampleError(DiscretizationError):
    """Raised when a training value is NaN or infinite.
    """


class ShapeMismatchError(DiscretizationError):
    """Raised when values and class labels have different lengths.
    """
