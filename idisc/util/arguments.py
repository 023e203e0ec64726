import numpy as np
import pandas as pd
import scipy.sparse

from idisc.util.errors import InsufficientDataError, InvalidSampleError, ShapeMismatchError


def check_discretization_arguments(values, labels):
    """Process the (values, labels) arguments of a single-attribute discretization.

    Returns
    -------
    values: ndarray of float64
        Attribute values, flattened.
    class_codes: ndarray of int
        Integer code of each label, indexing into classes.
    classes: ndarray
        The distinct labels, sorted.
    """
    if isinstance(values, (pd.Series, pd.DataFrame)):
        values = values.values
    if isinstance(labels, (pd.Series, pd.DataFrame)):
        labels = labels.values
    if scipy.sparse.issparse(values):
        values = values.toarray()

    values = np.asarray(values, dtype=float).ravel()
    labels = np.asarray(labels).ravel()

    if values.shape[0] != labels.shape[0]:
        raise ShapeMismatchError(
            "values and labels must have the same length. "
            "Got {} values and {} labels.".format(values.shape[0], labels.shape[0]))
    if values.shape[0] == 0:
        raise InsufficientDataError("Cannot discretize an empty sample.")
    if not np.all(np.isfinite(values)):
        bad = np.where(~np.isfinite(values))[0]
        raise InvalidSampleError(
            "Values must be finite. Found {} non-finite value(s), "
            "first at position {}.".format(bad.shape[0], bad[0]))

    classes, class_codes = np.unique(labels, return_inverse=True)  # deals with str inputs
    return values, class_codes.ravel(), classes


def check_columns(X, dcols):
    """Resolve the columns of X to be discretized.

    By default every numeric column is used, as in the other discretizers.
    """
    if len(dcols) == 0:
        return [col for col in X.columns if pd.api.types.is_numeric_dtype(X[col].dtype)]
    for col in dcols:
        if col not in X.columns:
            raise ValueError("{} is not a column in X.".format(col))
        if not pd.api.types.is_numeric_dtype(X[col].dtype):
            raise ValueError("Cannot discretize non-numeric columns.")
    return list(dcols)


def check_X_frame(X):
    """Process X argument for fit and transform methods, returning a data frame.
    """
    if isinstance(X, pd.DataFrame):
        return X
    if scipy.sparse.issparse(X):
        X = X.toarray()
    X = np.asarray(X)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return pd.DataFrame(X, columns=['X' + str(i) for i in range(X.shape[1])])
