import math
import numbers
import threading
import time

import numpy as np

from ..backend import get_backend
from ..exceptions import ConfigurationError
from ..progress_bar import bar
from ..scoring import CODING_FUNCTIONS
from ..scoring import ERROR_FUNCTIONS
from ..scoring import mean_squared_error
from ._incremental import IncrementalNystromState
from ._split import train_validation_split


def make_landmark_grid(n_landmarks=None, min_landmarks=None,
                       max_landmarks=None, n_landmark_steps=None,
                       n_samples_train=None):
    """Build the increasing sequence of numbers of landmarks to try.

    Either a fixed number of landmarks is given, or a range of numbers of
    landmarks, equally spaced between ``min_landmarks`` and
    ``max_landmarks`` and rounded (half away from zero). With a single
    step, the grid only contains ``max_landmarks``.

    Parameters
    ----------
    n_landmarks : int or None
        Fixed number of landmarks. If not None, the other range parameters
        are ignored.
    min_landmarks : int or None
        Smallest number of landmarks.
    max_landmarks : int or None
        Largest number of landmarks.
    n_landmark_steps : int or None
        Number of values in the grid.
    n_samples_train : int or None
        Number of training samples. If not None, check that the grid does not
        exceed it.

    Returns
    -------
    landmark_grid : array of shape (n_steps, )
        Strictly increasing numbers of landmarks.
    """
    if n_landmarks is not None:
        _check_positive_int(n_landmarks, "n_landmarks")
        grid = np.array([n_landmarks], dtype=int)
    else:
        if None in (min_landmarks, max_landmarks, n_landmark_steps):
            raise ConfigurationError(
                "Either n_landmarks, or all of (min_landmarks, max_landmarks,"
                " n_landmark_steps) must be given.")
        _check_positive_int(min_landmarks, "min_landmarks")
        _check_positive_int(max_landmarks, "max_landmarks")
        _check_positive_int(n_landmark_steps, "n_landmark_steps")
        if max_landmarks < min_landmarks:
            raise ConfigurationError(
                "max_landmarks=%d must not be smaller than min_landmarks=%d."
                % (max_landmarks, min_landmarks))

        if n_landmark_steps == 1:
            grid = np.array([max_landmarks], dtype=int)
        else:
            grid = np.linspace(min_landmarks, max_landmarks, n_landmark_steps)
            grid = np.floor(grid + 0.5).astype(int)

    _check_landmark_grid(grid, n_samples_train)
    return grid


def _check_positive_int(value, name):
    if (not isinstance(value, numbers.Integral) or isinstance(value, bool)
            or value < 1):
        raise ConfigurationError("%s must be a positive integer, got %r." %
                                 (name, value))


def _check_landmark_grid(grid, n_samples_train=None):
    if grid.ndim != 1 or grid.size == 0:
        raise ConfigurationError("The landmark grid must be a non-empty 1D "
                                 "sequence, got %r." % (grid, ))
    if grid[0] < 1:
        raise ConfigurationError("The landmark grid must contain positive "
                                 "integers, got %r." % (grid, ))
    if np.any(np.diff(grid) <= 0):
        raise ConfigurationError(
            "The landmark grid must be strictly increasing, got %s. Use fewer"
            " steps or a wider range of landmarks." % (grid.tolist(), ))
    if n_samples_train is not None and grid[-1] > n_samples_train:
        raise ConfigurationError(
            "The largest number of landmarks (%d) exceeds the number of "
            "training samples (%d)." % (grid[-1], n_samples_train))


def _check_alphas(alphas):
    alphas = np.atleast_1d(np.asarray(alphas, dtype=float))
    if alphas.ndim != 1 or alphas.size == 0:
        raise ConfigurationError("alphas must be a non-empty 1D sequence, got"
                                 " %r." % (alphas, ))
    if np.any(alphas < 0) or not np.all(np.isfinite(alphas)):
        raise ConfigurationError("alphas must be finite and non-negative, "
                                 "got %r." % (alphas, ))
    return alphas


def _check_function(function, all_functions, name):
    if isinstance(function, str):
        if function not in all_functions:
            raise ConfigurationError(
                "Unknown %s=%r, expected a callable or one of %s." %
                (name, function, sorted(all_functions)))
        function = all_functions[function]
    if not callable(function):
        raise ConfigurationError("%s must be callable, got %r." %
                                 (name, function))
    return function


class BestModelRecorder():
    """Record the best model seen during a grid search.

    A candidate replaces the current best only if its validation error is
    strictly smaller, so that ties keep the first candidate. NaN errors are
    never recorded. Stored arrays are copies, and updates are guarded by a
    lock so that candidates can be submitted from several threads.

    Attributes
    ----------
    validation_error : float
        Best validation error, +inf until a candidate is recorded.
    alpha : float or None
        Regularization parameter of the best model.
    alpha_index : int or None
        Index of alpha in the grid.
    n_landmarks : int or None
        Number of landmarks of the best model.
    n_landmarks_index : int or None
        Index of n_landmarks in the landmark grid.
    dual_coef : array of shape (n_landmarks, n_targets) or None
        Coefficients of the best model.
    landmarks : array of shape (n_landmarks, n_features) or None
        Landmarks of the best model.
    """

    def __init__(self):
        self.validation_error = math.inf
        self.alpha = None
        self.alpha_index = None
        self.n_landmarks = None
        self.n_landmarks_index = None
        self.dual_coef = None
        self.landmarks = None
        self._lock = threading.Lock()

    @property
    def is_empty(self):
        return self.dual_coef is None

    def consider(self, validation_error, alpha, alpha_index, n_landmarks,
                 n_landmarks_index, dual_coef, landmarks):
        """Record the candidate if it strictly improves the validation error.

        Returns
        -------
        recorded : bool
            Whether the candidate became the new best model.
        """
        backend = get_backend()
        validation_error = float(validation_error)
        with self._lock:
            if not validation_error < self.validation_error:
                return False
            self.validation_error = validation_error
            self.alpha = float(alpha)
            self.alpha_index = int(alpha_index)
            self.n_landmarks = int(n_landmarks)
            self.n_landmarks_index = int(n_landmarks_index)
            self.dual_coef = backend.copy(dual_coef)
            self.landmarks = backend.copy(landmarks)
            return True

    def __repr__(self):
        return ("%s(validation_error=%r, alpha=%r, n_landmarks=%r)" %
                (self.__class__.__name__, self.validation_error, self.alpha,
                 self.n_landmarks))


class NystromCVResults():
    """Results of a Nystrom kernel ridge grid search.

    Attributes
    ----------
    best : BestModelRecorder
        Best model over the grid.
    validation_errors : array of shape (n_alphas, n_steps)
        Validation error of each (alpha, n_landmarks) cell.
    training_errors : array of shape (n_alphas, n_steps), or None
        Training error of each cell, if requested.
    timing : dict
        Cumulated time in seconds, with keys "kernel_computation", "train",
        "eval", "total" (train + eval), and "refit".
    alphas : array of shape (n_alphas, )
        Grid of regularization parameters.
    landmark_grid : array of shape (n_steps, )
        Grid of numbers of landmarks.
    train_indices : array of shape (n_samples_train, )
        Indices of the samples used for training during the search.
    validation_indices : array of shape (n_samples_validation, )
        Indices of the samples used for validation during the search.
    refit_dual_coef : array of shape (best.n_landmarks, n_targets), or None
        Coefficients refitted on all samples, if refit is True.
    refit_landmarks : array of shape (best.n_landmarks, n_features), or None
        Landmarks of the refitted model, identical to ``best.landmarks``.
    """

    def __init__(self, best, validation_errors, training_errors, timing,
                 alphas, landmark_grid, train_indices, validation_indices,
                 refit_dual_coef=None, refit_landmarks=None):
        self.best = best
        self.validation_errors = validation_errors
        self.training_errors = training_errors
        self.timing = timing
        self.alphas = alphas
        self.landmark_grid = landmark_grid
        self.train_indices = train_indices
        self.validation_indices = validation_indices
        self.refit_dual_coef = refit_dual_coef
        self.refit_landmarks = refit_landmarks


def solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=(0.01, 0.1, 1.), landmark_grid=(10, ), kernel="gaussian",
        kernel_params=None, error_func=mean_squared_error, coding_func=None,
        validation_fraction=0.2, shuffle=False, random_state=None,
        store_training_error=False, refit=False, progress_bar=True):
    """Grid search over (alpha, n_landmarks) for Nystrom kernel ridge, with
    incremental Cholesky updates.

    For each alpha, the number of landmarks grows along the landmark grid.
    Instead of refactorizing the regularized Gram matrix at each step, the
    Cholesky factor is updated with rank-one updates and downdates, and only
    the kernel columns of the new landmarks are computed.

    Parameters
    ----------
    X : array of shape (n_samples, n_features)
        Training features.
    Y : array of shape (n_samples, n_targets)
        Training targets.
    alphas : float or array of shape (n_alphas, )
        Regularization parameters, non-negative.
    landmark_grid : array of shape (n_steps, )
        Strictly increasing numbers of landmarks, see
        ``make_landmark_grid``.
    kernel : str or callable
        Kernel function, see ``pairwise_kernels``.
    kernel_params : dict or None
        Additional parameters for the kernel function.
    error_func : str or callable
        Function ``(Y_true, Y_pred) -> float`` minimized over the grid, or a
        name in ``ERROR_FUNCTIONS``.
    coding_func : str, callable, or None
        Function applied to the predictions before computing the error, or a
        name in ``CODING_FUNCTIONS``. Used for classification.
    validation_fraction : float in ]0, 1[
        Fraction of samples held out for validation.
    shuffle : bool
        Whether to shuffle the samples before the split.
    random_state : int, np.random.RandomState, or None
        Random generator seed, used only if shuffle is True.
    store_training_error : bool
        Whether to also compute the training error of each cell.
    refit : bool
        Whether to refit the best (alpha, n_landmarks) on all samples.
    progress_bar : bool
        If True, display a progress bar over alphas.

    Returns
    -------
    results : NystromCVResults
        Error paths, best model, timings, and refitted coefficients.
    """
    return _solve_nystrom_ridge_cv(
        X, Y, alphas=alphas, landmark_grid=landmark_grid, kernel=kernel,
        kernel_params=kernel_params, error_func=error_func,
        coding_func=coding_func, validation_fraction=validation_fraction,
        shuffle=shuffle, random_state=random_state,
        store_training_error=store_training_error, refit=refit,
        progress_bar=progress_bar, incremental=True)


def solve_nystrom_ridge_cv_cholesky(
        X, Y, alphas=(0.01, 0.1, 1.), landmark_grid=(10, ), kernel="gaussian",
        kernel_params=None, error_func=mean_squared_error, coding_func=None,
        validation_fraction=0.2, shuffle=False, random_state=None,
        store_training_error=False, refit=False, progress_bar=True):
    """Grid search over (alpha, n_landmarks) for Nystrom kernel ridge, with a
    new Cholesky factorization at each cell.

    Same parameters and results as ``solve_nystrom_ridge_cv_incremental``,
    up to rounding errors, but with a cost of O(m^3) per cell.

    Parameters
    ----------
    X : array of shape (n_samples, n_features)
        Training features.
    Y : array of shape (n_samples, n_targets)
        Training targets.
    alphas : float or array of shape (n_alphas, )
        Regularization parameters, non-negative.
    landmark_grid : array of shape (n_steps, )
        Strictly increasing numbers of landmarks.
    kernel : str or callable
        Kernel function, see ``pairwise_kernels``.
    kernel_params : dict or None
        Additional parameters for the kernel function.
    error_func : str or callable
        Error function minimized over the grid.
    coding_func : str, callable, or None
        Function applied to the predictions before computing the error.
    validation_fraction : float in ]0, 1[
        Fraction of samples held out for validation.
    shuffle : bool
        Whether to shuffle the samples before the split.
    random_state : int, np.random.RandomState, or None
        Random generator seed, used only if shuffle is True.
    store_training_error : bool
        Whether to also compute the training error of each cell.
    refit : bool
        Whether to refit the best (alpha, n_landmarks) on all samples.
    progress_bar : bool
        If True, display a progress bar over alphas.

    Returns
    -------
    results : NystromCVResults
        Error paths, best model, timings, and refitted coefficients.
    """
    return _solve_nystrom_ridge_cv(
        X, Y, alphas=alphas, landmark_grid=landmark_grid, kernel=kernel,
        kernel_params=kernel_params, error_func=error_func,
        coding_func=coding_func, validation_fraction=validation_fraction,
        shuffle=shuffle, random_state=random_state,
        store_training_error=store_training_error, refit=refit,
        progress_bar=progress_bar, incremental=False)


def _solve_nystrom_ridge_cv(X, Y, alphas, landmark_grid, kernel,
                            kernel_params, error_func, coding_func,
                            validation_fraction, shuffle, random_state,
                            store_training_error, refit, progress_bar,
                            incremental):
    backend = get_backend()
    X, Y = backend.check_arrays(X, Y)
    if X.ndim != 2 or Y.ndim != 2:
        raise ValueError("X and Y must be 2D arrays, got X.ndim=%d and "
                         "Y.ndim=%d." % (X.ndim, Y.ndim))
    if X.shape[0] != Y.shape[0]:
        raise ValueError("X and Y must have the same number of samples, got "
                         "%d and %d." % (X.shape[0], Y.shape[0]))

    alphas = _check_alphas(alphas)
    landmark_grid = np.atleast_1d(np.asarray(landmark_grid))
    if not np.issubdtype(landmark_grid.dtype, np.integer):
        raise ConfigurationError("The landmark grid must contain integers, "
                                 "got %r." % (landmark_grid, ))
    error_func = _check_function(error_func, ERROR_FUNCTIONS, "error_func")
    if coding_func is not None:
        coding_func = _check_function(coding_func, CODING_FUNCTIONS,
                                      "coding_func")

    train_indices, validation_indices = train_validation_split(
        X.shape[0], validation_fraction=validation_fraction, shuffle=shuffle,
        random_state=random_state)
    _check_landmark_grid(landmark_grid, n_samples_train=len(train_indices))

    train = backend.asarray(train_indices)
    val = backend.asarray(validation_indices)
    X_train, Y_train = X[train], Y[train]
    X_val, Y_val = X[val], Y[val]

    n_alphas, n_steps = len(alphas), len(landmark_grid)
    validation_errors = np.full((n_alphas, n_steps), np.nan)
    training_errors = (np.full((n_alphas, n_steps), np.nan)
                       if store_training_error else None)
    timing = dict(kernel_computation=0., train=0., eval=0., total=0.,
                  refit=0.)
    best = BestModelRecorder()

    def _error(Y_true, Y_pred):
        if coding_func is not None:
            Y_pred = coding_func(Y_pred)
        return float(error_func(Y_true, Y_pred))

    title = "%d alphas x %d landmark steps" % (n_alphas, n_steps)
    for ii, alpha in enumerate(bar(alphas, title=title, use_it=progress_bar)):
        state = IncrementalNystromState(
            X_train, Y_train, alpha=alpha,
            max_landmarks=int(landmark_grid[-1]), kernel=kernel,
            kernel_params=kernel_params)

        for jj, n_landmarks in enumerate(landmark_grid):
            n_landmarks = int(n_landmarks)
            if incremental and jj > 0:
                state.extend(n_landmarks)
            else:
                state.initialize(n_landmarks)

            start = time.time()
            validation_errors[ii, jj] = _error(Y_val, state.predict(X_val))
            if store_training_error:
                training_errors[ii, jj] = _error(
                    Y_train, state.training_predictions())
            timing["eval"] += time.time() - start

            best.consider(validation_errors[ii, jj], alpha=alpha,
                          alpha_index=ii, n_landmarks=n_landmarks,
                          n_landmarks_index=jj, dual_coef=state.dual_coef_,
                          landmarks=state.landmarks_)

        timing["kernel_computation"] += state.timing_["kernel_computation"]
        timing["train"] += state.timing_["train"]
        del state

    timing["total"] = timing["train"] + timing["eval"]

    refit_dual_coef, refit_landmarks = None, None
    if refit:
        if best.is_empty:
            raise RuntimeError("Cannot refit: no cell of the grid has a "
                               "finite validation error.")
        start = time.time()
        # training samples first, so that the best landmarks stay a prefix
        order = backend.asarray(
            np.concatenate([train_indices, validation_indices]))
        state = IncrementalNystromState(
            X[order], Y[order], alpha=best.alpha,
            max_landmarks=best.n_landmarks, kernel=kernel,
            kernel_params=kernel_params)
        state.initialize(best.n_landmarks)
        refit_dual_coef = state.dual_coef_
        refit_landmarks = state.landmarks_
        timing["refit"] = time.time() - start

    return NystromCVResults(
        best=best, validation_errors=validation_errors,
        training_errors=training_errors, timing=timing, alphas=alphas,
        landmark_grid=landmark_grid, train_indices=train_indices,
        validation_indices=validation_indices,
        refit_dual_coef=refit_dual_coef, refit_landmarks=refit_landmarks)


#: Dictionary with all Nystrom kernel ridge cross-validation solvers.
NYSTROM_RIDGE_CV_SOLVERS = {
    "incremental_cholesky": solve_nystrom_ridge_cv_incremental,
    "cholesky": solve_nystrom_ridge_cv_cholesky,
}
