"""
.. include:: ../readme.md
"""
# Python `idisc` package for supervised, entropy-based discretization compatible with scikit-learn.

import logging

from .discretization.categorizer import Categorizer, IntervalCategory
from .discretization.discretizer import MDLPDiscretizer
from .discretization.mdlp import discretize, fit_mdlp, categorize_by_entropy_minimization
from .util.errors import DiscretizationError, InsufficientDataError, InvalidSampleError, ShapeMismatchError

logging.getLogger(__name__).addHandler(logging.NullHandler())

DISCRETIZERS = [MDLPDiscretizer]
