from sklearn.base import BaseEstimator, RegressorMixin, MultiOutputMixin
from sklearn.utils.validation import check_is_fitted

from ._grid_search import NYSTROM_RIDGE_CV_SOLVERS
from ._grid_search import make_landmark_grid
from ._kernels import pairwise_kernels
from ._kernels import PAIRWISE_KERNEL_FUNCTIONS

from ..validation import check_array
from ..validation import _get_string_dtype
from ..backend import get_backend
from ..backend import force_cpu_backend
from ..scoring import r2_score


class NystromKernelRidgeCV(MultiOutputMixin, RegressorMixin, BaseEstimator):
    """Nystrom kernel ridge regression, with a grid search over the
    regularization and the number of landmarks.

    Solve the Nystrom kernel ridge regression::

        w* = argmin_w ||A @ w - Y||^2 + n_samples * alpha (w.T @ B @ w)

    where A = K(X, landmarks) and B = K(landmarks, landmarks), the landmarks
    being a subset of the training samples. Both alpha and the number of
    landmarks are selected on a held-out validation set.

    Parameters
    ----------
    alphas : array of shape (n_alphas, )
        List of regularization parameters to try.

    n_landmarks : int or None
        Fixed number of landmarks. If None, the number of landmarks is
        selected in a grid defined by min_landmarks, max_landmarks, and
        n_landmark_steps.

    min_landmarks : int
        Smallest number of landmarks in the grid.

    max_landmarks : int
        Largest number of landmarks in the grid. Must not exceed the number
        of samples used for training during the search.

    n_landmark_steps : int
        Number of values in the landmark grid.

    kernel : str or callable, default="gaussian"
        Kernel mapping. Available kernels are: 'gaussian', 'rbf',
        'laplacian', 'linear', 'polynomial', 'poly'.
        A callable should accept two arrays and the keyword arguments passed
        to this object as kernel_params, and should return a kernel matrix.

    kernel_params : dict or None
        Additional parameters for the kernel function.
        See more details in the docstring of the function:
        ``NystromKernelRidgeCV.ALL_KERNELS[kernel]``

    solver : str
        Algorithm used during the search, "incremental_cholesky" (default)
        or "cholesky".

    solver_params : dict or None
        Additional parameters for the solver.
        See more details in the docstring of the function:
        ``NystromKernelRidgeCV.ALL_SOLVERS[solver]``

    validation_fraction : float in ]0, 1[
        Fraction of samples held out for validation.

    shuffle : bool
        Whether to shuffle the samples before the train/validation split.

    random_state : int, np.random.RandomState, or None
        Random generator seed, used only if shuffle is True.

    store_training_error : bool
        Whether to also compute the training errors during the search.

    refit : bool
        If True, refit the best model on all samples. If False, keep the
        model fitted during the search.

    error_func : str, callable, or None
        Error minimized during the search. If None, use the mean squared
        error. See ``nystrom_cv.scoring.ERROR_FUNCTIONS``.

    coding_func : str, callable, or None
        Function applied to the predictions before computing the validation
        error, for classification. See
        ``nystrom_cv.scoring.CODING_FUNCTIONS``.

    progress_bar : bool
        If True, display a progress bar over alphas.

    force_cpu : bool
        If True, computations will be performed on CPU, ignoring the
        current backend. If False, use the current backend.

    Attributes
    ----------
    dual_coef_ : array of shape (n_landmarks,) or (n_landmarks, n_targets)
        Coefficients of the selected model.

    landmarks_ : array of shape (n_landmarks, n_features)
        Landmarks of the selected model.

    best_alpha_ : float
        Selected regularization parameter.

    best_alpha_index_ : int
        Index of the selected alpha in alphas.

    best_n_landmarks_ : int
        Selected number of landmarks.

    best_validation_error_ : float
        Validation error of the selected model.

    cv_errors_ : array of shape (n_alphas, n_steps)
        Validation errors over the grid.

    train_errors_ : array of shape (n_alphas, n_steps) or None
        Training errors over the grid, if store_training_error is True.

    landmark_grid_ : array of shape (n_steps, )
        Numbers of landmarks tried.

    timing_ : dict
        Cumulated times of the search, in seconds.

    n_features_in_ : int
        Number of features used during the fit.

    Examples
    --------
    >>> from nystrom_cv.nystrom import NystromKernelRidgeCV
    >>> import numpy as np
    >>> n_samples, n_features, n_targets = 100, 5, 3
    >>> X = np.random.randn(n_samples, n_features)
    >>> Y = np.random.randn(n_samples, n_targets)
    >>> clf = NystromKernelRidgeCV(min_landmarks=5, max_landmarks=50)
    >>> clf.fit(X, Y)
    NystromKernelRidgeCV(max_landmarks=50, min_landmarks=5)
    """
    ALL_KERNELS = PAIRWISE_KERNEL_FUNCTIONS
    ALL_SOLVERS = NYSTROM_RIDGE_CV_SOLVERS

    def __init__(self, alphas=(0.01, 0.1, 1.), n_landmarks=None,
                 min_landmarks=10, max_landmarks=100, n_landmark_steps=10,
                 kernel="gaussian", kernel_params=None,
                 solver="incremental_cholesky", solver_params=None,
                 validation_fraction=0.2, shuffle=False, random_state=None,
                 store_training_error=False, refit=True, error_func=None,
                 coding_func=None, progress_bar=False, force_cpu=False):
        self.alphas = alphas
        self.n_landmarks = n_landmarks
        self.min_landmarks = min_landmarks
        self.max_landmarks = max_landmarks
        self.n_landmark_steps = n_landmark_steps
        self.kernel = kernel
        self.kernel_params = kernel_params
        self.solver = solver
        self.solver_params = solver_params
        self.validation_fraction = validation_fraction
        self.shuffle = shuffle
        self.random_state = random_state
        self.store_training_error = store_training_error
        self.refit = refit
        self.error_func = error_func
        self.coding_func = coding_func
        self.progress_bar = progress_bar
        self.force_cpu = force_cpu

    @force_cpu_backend
    def fit(self, X, y=None):
        """Fit the model, selecting alpha and the number of landmarks.

        Parameters
        ----------
        X : array of shape (n_samples, n_features)
            Training data.

        y : array of shape (n_samples,) or (n_samples, n_targets)
            Target values.

        Returns
        -------
        self : returns an instance of self.
        """
        X = check_array(X, ndim=2)
        self.dtype_ = _get_string_dtype(X)
        y = check_array(y, dtype=self.dtype_, ndim=[1, 2])
        if X.shape[0] != y.shape[0]:
            raise ValueError("Inconsistent number of samples.")
        self.n_features_in_ = X.shape[1]

        ravel = False
        if y.ndim == 1:
            y = y[:, None]
            ravel = True

        landmark_grid = make_landmark_grid(
            n_landmarks=self.n_landmarks, min_landmarks=self.min_landmarks,
            max_landmarks=self.max_landmarks,
            n_landmark_steps=self.n_landmark_steps)
        error_func = ("mean_squared_error"
                      if self.error_func is None else self.error_func)

        # ------------------ call the solver
        results = self._call_solver(
            X=X, Y=y, alphas=self.alphas, landmark_grid=landmark_grid,
            kernel=self.kernel, kernel_params=self.kernel_params,
            error_func=error_func, coding_func=self.coding_func,
            validation_fraction=self.validation_fraction,
            shuffle=self.shuffle, random_state=self.random_state,
            store_training_error=self.store_training_error, refit=self.refit,
            progress_bar=self.progress_bar)
        del X

        best = results.best
        if best.is_empty:
            raise RuntimeError("No finite validation error was found during "
                               "the grid search.")
        self.best_alpha_ = best.alpha
        self.best_alpha_index_ = best.alpha_index
        self.best_n_landmarks_ = best.n_landmarks
        self.best_validation_error_ = best.validation_error
        self.cv_errors_ = results.validation_errors
        self.train_errors_ = results.training_errors
        self.landmark_grid_ = results.landmark_grid
        self.timing_ = results.timing

        if self.refit:
            self.dual_coef_ = results.refit_dual_coef
            self.landmarks_ = _to_cpu(results.refit_landmarks)
        else:
            self.dual_coef_ = best.dual_coef
            self.landmarks_ = _to_cpu(best.landmarks)

        if ravel:
            self.dual_coef_ = self.dual_coef_[:, 0]

        return self

    def _call_solver(self, **direct_params):
        """Helper function merging solver parameters."""
        if self.solver not in self.ALL_SOLVERS:
            raise ValueError("Unknown solver=%r." % self.solver)

        function = self.ALL_SOLVERS[self.solver]
        solver_params = self.solver_params or {}

        # check duplicated parameters
        intersection = set(direct_params.keys()).intersection(
            set(solver_params.keys()))
        if intersection:
            raise ValueError(
                'Parameters %s should not be given in solver_params, since '
                'they are either fixed or have a direct parameter in %s.' %
                (intersection, self.__class__.__name__))

        return function(**direct_params, **solver_params)

    @force_cpu_backend
    def predict(self, X):
        """Predict using the model.

        Parameters
        ----------
        X : array of shape (n_samples_test, n_features)
            Samples.

        Returns
        -------
        Y_hat : array of shape (n_samples,) or (n_samples, n_targets)
            Returns predicted values.
        """
        check_is_fitted(self)
        backend = get_backend()
        X = check_array(X, dtype=self.dtype_, ndim=2)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(
                'Different number of features in X than during fit.')

        K = self._get_kernel(X, self.landmarks_)
        del X

        return backend.to_cpu(K) @ backend.to_cpu(self.dual_coef_)

    @force_cpu_backend
    def score(self, X, y):
        """Return the coefficient of determination R^2 of the prediction.

        Parameters
        ----------
        X : array of shape (n_samples_test, n_features)
            Samples.

        y : array-like of shape (n_samples,) or (n_samples, n_targets)
            True values for X.

        Returns
        -------
        score : array of shape (n_targets, )
            R^2 of self.predict(X) versus y.
        """
        y_pred = self.predict(X)
        y_true = check_array(y, dtype=self.dtype_, ndim=self.dual_coef_.ndim)

        if y_true.ndim == 1:
            return r2_score(y_true[:, None], y_pred[:, None])[0]
        else:
            return r2_score(y_true, y_pred)

    def _get_kernel(self, X, Y):
        backend = get_backend()
        kernel_params = self.kernel_params or {}
        Y = backend.asarray_like(Y, ref=X)
        kernel = pairwise_kernels(X, Y, metric=self.kernel, **kernel_params)
        return backend.asarray(kernel)

def _to_cpu(X):
    backend = get_backend()
    return backend.to_cpu(X)
