import logging
import warnings
from types import MappingProxyType

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.preprocessing import OneHotEncoder
from sklearn.utils.validation import check_is_fitted

from idisc.discretization.mdlp import fit_mdlp
from idisc.util.arguments import check_columns, check_X_frame
from idisc.util.errors import InvalidSampleError, ShapeMismatchError

logger = logging.getLogger(__name__)


class MDLPDiscretizer(TransformerMixin, BaseEstimator):
    """
    Discretize numeric columns into intervals chosen by recursive entropy
    minimization with the MDLP stopping criterion (Fayyad and Irani, 1993).
    Unlike the unsupervised discretizers, the number and placement of the
    intervals of each column depend on the class labels y.

    Params
    ------
    dcols : list of strings
        The names of the columns to be discretized; by default,
        discretize all float and int columns in X.

    encode : {'label', 'ordinal', 'onehot'}, default='label'
        Method used to encode the transformed result.

        label
            Replace each value by the label of its interval,
            e.g. "]-Inf, 3.5]".
        ordinal
            Return the interval index encoded as an integer value.
        onehot
            Encode the transformed result with one-hot encoding and
            return a dense array.

    onehot_drop : {'first', 'if_binary'} or None, default='if_binary'
        Specifies a methodology to use to drop one of the categories
        per feature when encode = "onehot".

    merge_pure : bool, default=False
        Merge runs of contiguous blocks holding a single, shared class
        before searching for cut points. Such runs never contain an
        optimal cut point, so this only speeds the search up.

    max_depth : int or None, default=None
        Maximum depth of the recursive bi-partitioning; a column gets
        at most 2 ** max_depth intervals. None means no limit.

    n_jobs : int or None, default=None
        Number of jobs used to discretize the columns in parallel.

    Attributes
    ----------
    dcols_ : list
        Columns that were discretized.

    categorizers_ : read-only mapping
        Maps each column in dcols_ to its fitted Categorizer.

    results_ : dict
        Maps each column in dcols_ to its MDLPResult (blocks and
        partition tree).

    classes_ : ndarray
        Distinct class labels seen in y.

    onehot_ : object of class OneHotEncoder()
        One hot encoding fit. Ignored if encode != 'onehot'
    """

    def __init__(self, dcols=[], encode='label', onehot_drop='if_binary',
                 merge_pure=False, max_depth=None, n_jobs=None):
        self.dcols = dcols
        self.encode = encode
        self.onehot_drop = onehot_drop
        self.merge_pure = merge_pure
        self.max_depth = max_depth
        self.n_jobs = n_jobs

    def _validate_args(self):
        """
        Check if encode, max_depth arguments are valid.
        """
        valid_encode = ('label', 'ordinal', 'onehot')
        if self.encode not in valid_encode:
            raise ValueError("Valid options for 'encode' are {}. Got encode={!r} instead."
                             .format(valid_encode, self.encode))
        if self.max_depth is not None and (int(self.max_depth) != self.max_depth or self.max_depth < 0):
            raise ValueError("max_depth must be None or a non-negative int. Got {!r} instead."
                             .format(self.max_depth))

    def fit(self, X, y):
        """
        Fit the estimator.

        Parameters
        ----------
        X : data frame or array-like of shape (n_samples, n_features)
            (Training) data to be discretized.

        y : array-like of shape (n_samples,)
            Class labels.

        Returns
        -------
        self
        """
        self._validate_args()
        X = check_X_frame(X)
        self.dcols_ = check_columns(X, self.dcols)
        if len(self.dcols_) == 0:
            raise ValueError("X has no numeric columns to discretize.")

        y = np.asarray(y.values if isinstance(y, (pd.Series, pd.DataFrame)) else y).ravel()
        if y.shape[0] != X.shape[0]:
            raise ShapeMismatchError("X and y must have the same number of rows. "
                                     "Got {} and {}.".format(X.shape[0], y.shape[0]))
        self.classes_ = np.unique(y)

        results = Parallel(n_jobs=self.n_jobs)(
            delayed(fit_mdlp)(X[col].values, y, merge_pure=self.merge_pure, max_depth=self.max_depth)
            for col in self.dcols_)
        self.results_ = dict(zip(self.dcols_, results))

        for col, categorizer in self.categorizers_.items():
            logger.info('%s: %d interval(s) %s', col, len(categorizer), categorizer)
        single = [col for col, categorizer in self.categorizers_.items() if len(categorizer) == 1]
        if single:
            warnings.warn("No cut point was accepted for columns {}; they are mapped to a "
                          "single interval.".format(single))

        if self.encode == 'onehot':
            self.onehot_ = OneHotEncoder(
                categories=[self.categorizers_[col].labels for col in self.dcols_],
                drop=self.onehot_drop, sparse_output=False)
            self.onehot_.fit(self._discretize_labels(X))
        return self

    @property
    def categorizers_(self):
        check_is_fitted(self, "results_")
        return MappingProxyType({col: r.categorizer for col, r in self.results_.items()})

    def _discretize_labels(self, X):
        labels = {}
        for col in self.dcols_:
            values = np.asarray(X[col].values, dtype=float)
            if not np.all(np.isfinite(values)):
                raise InvalidSampleError("Column {} contains non-finite values.".format(col))
            labels[col] = self.categorizers_[col].transform(values)
        return pd.DataFrame(labels, columns=self.dcols_, index=X.index)

    def _discretize_codes(self, X):
        codes = {}
        for col in self.dcols_:
            values = np.asarray(X[col].values, dtype=float)
            if not np.all(np.isfinite(values)):
                raise InvalidSampleError("Column {} contains non-finite values.".format(col))
            codes[col] = self.categorizers_[col].codes(values)
        return pd.DataFrame(codes, columns=self.dcols_, index=X.index)

    def transform(self, X):
        """
        Discretize the data.

        Parameters
        ----------
        X : data frame or array-like of shape (n_samples, n_features)
            Data to be discretized.

        Returns
        -------
        X_discretized : data frame
            Data with features in dcols transformed to the
            interval space. All other features remain unchanged.
        """
        check_is_fitted(self)
        X = check_X_frame(X)
        for col in self.dcols_:
            if col not in X.columns:
                raise ValueError("{} is not a column in X.".format(col))

        if self.encode == 'ordinal':
            discretized_df = self._discretize_codes(X)
        else:
            discretized_df = self._discretize_labels(X)
        return self._transform_postprocessing(discretized_df, X)

    def _transform_postprocessing(self, discretized_df, X):
        """
        Final processing in transform method. Does one-hot encoding
        (if specified) and joins discretized columns to the
        un-transformed columns in X.
        """
        discretized_df = discretized_df[self.dcols_]

        # return onehot encoded X if specified
        if self.encode == "onehot":
            colnames = [str(col) for col in self.dcols_]
            onehot_col_names = self.onehot_.get_feature_names_out(colnames)
            discretized_df = self.onehot_.transform(discretized_df)
            discretized_df = pd.DataFrame(discretized_df,
                                          columns=onehot_col_names,
                                          index=X.index).astype(int)

        # join discretized columns with rest of X
        cols = [col for col in X.columns if col not in self.dcols_]
        X_discretized = pd.concat([discretized_df, X[cols]], axis=1)

        return X_discretized

    def categorize(self, col, value):
        """Label of the interval of column col that contains value."""
        check_is_fitted(self)
        return self.categorizers_[col].categorize(value)
