"""Error functions and coding functions used during cross-validation.

Error functions take ``(y_true, y_pred)`` and return a scalar, where lower is
better. Coding functions map real-valued predictions to labels before
scoring, for classification tasks encoded with +1/-1 targets.
"""
import warnings

from .backend import get_backend


def mean_squared_error(y_true, y_pred):
    """Mean squared error, averaged over samples and targets.

    Parameters
    ----------
    y_true : array of shape (n_samples, n_targets)
        Ground truth.
    y_pred : array of shape (n_samples, n_targets)
        Predictions.

    Returns
    -------
    error : float
        Mean squared error.
    """
    backend = get_backend()
    y_true, y_pred = backend.check_arrays(y_true, y_pred)
    y_pred = _check_finite(y_pred)

    return float(((y_true - y_pred) ** 2).mean())


def relative_error(y_true, y_pred):
    """Squared error normalized by the squared norm of the ground truth.

    Parameters
    ----------
    y_true : array of shape (n_samples, n_targets)
        Ground truth.
    y_pred : array of shape (n_samples, n_targets)
        Predictions.

    Returns
    -------
    error : float
        ||y_true - y_pred||^2 / ||y_true||^2, or the unnormalized squared
        error if y_true is zero.
    """
    backend = get_backend()
    y_true, y_pred = backend.check_arrays(y_true, y_pred)
    y_pred = _check_finite(y_pred)

    error = float(((y_true - y_pred) ** 2).sum())
    norm = float((y_true ** 2).sum())
    return error / norm if norm > 0 else error


def misclassification_error(y_true, y_pred):
    """Fraction of misclassified samples.

    A sample counts as misclassified if any of its targets differs, so that
    one-vs-all codings (see ``argmax_coding``) are scored per sample.

    Parameters
    ----------
    y_true : array of shape (n_samples, n_targets)
        True labels.
    y_pred : array of shape (n_samples, n_targets)
        Predicted labels, typically obtained with a coding function.

    Returns
    -------
    error : float
        Fraction of misclassified samples, in [0, 1].
    """
    backend = get_backend()
    y_true, y_pred = backend.check_arrays(y_true, y_pred)
    if y_true.ndim == 1:
        y_true, y_pred = y_true[:, None], y_pred[:, None]

    wrong = backend.any(y_true != y_pred, 1)
    return float(backend.sum(wrong)) / y_true.shape[0]


def r2_score(y_true, y_pred):
    """R2 score, computed for each target.

    Parameters
    ----------
    y_true : array or Tensor of shape (n_samples, n_targets)
        Ground truth.
    y_pred : array or Tensor of shape (n_samples, n_targets)
        Predictions.

    Returns
    -------
    r2 : array of shape (n_targets, )
        R2 scores.
    """
    backend = get_backend()
    y_true, y_pred = backend.check_arrays(y_true, y_pred)
    y_pred = _check_finite(y_pred)

    error = ((y_true - y_pred) ** 2).sum(0)
    var = ((y_true - y_true.mean(0)) ** 2).sum(0)
    r2 = 1. - error / var
    r2[var == 0] = 0

    return r2


###############################################################################
# coding functions


def sign_coding(y_pred):
    """Binary coding: map predictions to +1/-1 labels (0 is mapped to +1)."""
    backend = get_backend()
    labels = backend.sign(y_pred)
    labels[labels == 0] = 1
    return labels


def argmax_coding(y_pred):
    """One-vs-all coding: +1 on the largest output of each sample, -1
    elsewhere."""
    backend = get_backend()
    labels = backend.full_like(y_pred, fill_value=-1)
    best = backend.argmax(y_pred, 1)
    labels[backend.arange(y_pred.shape[0]), best] = 1
    return labels


###############################################################################


def _check_finite(y_pred):
    backend = get_backend()

    is_nan = backend.isnan(y_pred)
    if backend.any(is_nan):
        warnings.warn('nan in y_pred.')
        y_pred[is_nan] = 0

    isinf = backend.isinf(y_pred)
    if backend.any(isinf):
        warnings.warn('inf in y_pred.')
        y_pred[isinf] = 0

    return y_pred


#: Dictionary with all error functions.
ERROR_FUNCTIONS = {
    "mean_squared_error": mean_squared_error,
    "relative_error": relative_error,
    "misclassification_error": misclassification_error,
}

#: Dictionary with all coding functions.
CODING_FUNCTIONS = {
    "sign": sign_coding,
    "argmax": argmax_coding,
}
