import time

from ..backend import get_backend
from ..exceptions import NumericalInstabilityError
from ._cholesky import _append_column_inplace
from ._cholesky import solve_cholesky
from ._kernels import pairwise_kernels


class IncrementalNystromState():
    """Nystrom kernel ridge regression with a growing number of landmarks.

    Solve the Nystrom kernel ridge regression::

        w* = argmin_w ||A @ w - Y||^2 + n_samples * alpha (w.T @ B @ w)

    where A = K(X, X[:m]) is the kernel between all samples and the first m
    samples (the landmarks), and B = K(X[:m], X[:m]). The solution is
    obtained from the upper triangular Cholesky factor R of the regularized
    Gram matrix::

        R.T @ R = A.T @ A + n_samples * alpha * B

    When the number of landmarks grows from m_prev to m, the new columns of
    A are appended, and R is updated with rank-one updates and downdates,
    in O(m^2) per new landmark instead of O(m^3) for a new factorization.

    Each instance holds the state of a single regularization parameter.
    Buffers are allocated once for ``max_landmarks`` landmarks.

    Parameters
    ----------
    X : array of shape (n_samples, n_features)
        Training features. The landmarks are the first rows of X.
    Y : array of shape (n_samples, n_targets)
        Training targets.
    alpha : float >= 0
        Regularization parameter.
    max_landmarks : int
        Maximum number of landmarks.
    kernel : str or callable
        Kernel function, see ``pairwise_kernels``.
    kernel_params : dict or None
        Additional parameters for the kernel function.

    Attributes
    ----------
    n_landmarks_ : int
        Current number of landmarks (0 before initialization).
    dual_coef_ : array of shape (n_landmarks_, n_targets)
        Current regression coefficients.
    timing_ : dict
        Time spent in kernel computations ("kernel_computation") and in the
        factorization and solves ("train"), in seconds.
    """

    def __init__(self, X, Y, alpha, max_landmarks, kernel="gaussian",
                 kernel_params=None):
        backend = get_backend()
        if max_landmarks > X.shape[0]:
            raise ValueError("max_landmarks=%d is larger than the number of "
                             "samples %d." % (max_landmarks, X.shape[0]))

        self.X = X
        self.Y = Y
        self.alpha = float(alpha)
        self.max_landmarks = max_landmarks
        self.kernel = kernel
        self.kernel_params = kernel_params

        n_samples, n_targets = Y.shape
        self.A_ = backend.zeros_like(Y, shape=(n_samples, max_landmarks))
        self.AtY_ = backend.zeros_like(Y, shape=(max_landmarks, n_targets))
        self.R_ = backend.zeros_like(Y, shape=(max_landmarks, max_landmarks))
        self.n_landmarks_ = 0
        self.dual_coef_ = None
        self.timing_ = dict(kernel_computation=0., train=0.)

    @property
    def landmarks_(self):
        """Current landmarks, the first ``n_landmarks_`` training samples."""
        return self.X[:self.n_landmarks_]

    @property
    def factor_(self):
        """Current upper triangular Cholesky factor."""
        return self.R_[:self.n_landmarks_, :self.n_landmarks_]

    def _kernel(self, X, Y):
        kernel_params = self.kernel_params or {}
        return pairwise_kernels(X, Y, metric=self.kernel, **kernel_params)

    def initialize(self, n_landmarks):
        """Factorize from scratch with the first ``n_landmarks`` samples.

        Parameters
        ----------
        n_landmarks : int
            Number of landmarks, at most ``max_landmarks``.

        Returns
        -------
        self
        """
        backend = get_backend()
        self._check_n_landmarks(n_landmarks, minimum=1)
        m = n_landmarks

        start = time.time()
        K = self._kernel(self.X, self.X[:m])
        self.timing_["kernel_computation"] += time.time() - start

        start = time.time()
        self.A_[:, :m] = K
        self.AtY_[:m] = K.T @ self.Y
        gram = K.T @ K + self.X.shape[0] * self.alpha * K[:m]
        try:
            R = backend.cholesky(gram)
        except NumericalInstabilityError as error:
            raise NumericalInstabilityError(
                "The regularized Gram matrix is not positive-definite, with "
                "alpha=%r and n_landmarks=%d. Increase alpha or change the "
                "kernel parameters." % (self.alpha, m)) from error

        self.R_[:] = 0
        self.R_[:m, :m] = R
        self.n_landmarks_ = m
        self.dual_coef_ = solve_cholesky(self.factor_, self.AtY_[:m])
        self.timing_["train"] += time.time() - start
        return self

    def extend(self, n_landmarks):
        """Add landmarks up to ``n_landmarks``, updating the factorization.

        Only the kernel between all samples and the new landmarks is
        computed. Each new landmark extends the Cholesky factor with one
        rank-one update and one rank-one downdate.

        Parameters
        ----------
        n_landmarks : int
            New number of landmarks, strictly larger than ``n_landmarks_``
            and at most ``max_landmarks``.

        Returns
        -------
        self
        """
        if self.n_landmarks_ == 0:
            raise ValueError("Call initialize before extend.")
        self._check_n_landmarks(n_landmarks, minimum=self.n_landmarks_ + 1)
        m_prev, m = self.n_landmarks_, n_landmarks

        start = time.time()
        a_block = self._kernel(self.X, self.X[m_prev:m])
        self.timing_["kernel_computation"] += time.time() - start

        start = time.time()
        reg = self.X.shape[0] * self.alpha
        for jj in range(m - m_prev):
            p = m_prev + jj
            a = a_block[:, jj]
            # landmarks are samples, so b and beta are rows of a
            c = self.A_[:, :p].T @ a + reg * a[:p]
            gamma = a @ a + reg * a[p]

            self.A_[:, p] = a
            self.AtY_[p] = a @ self.Y
            try:
                _append_column_inplace(self.R_[:p + 1, :p + 1], c, gamma)
            except NumericalInstabilityError as error:
                raise NumericalInstabilityError(
                    "Incremental Cholesky update failed when adding landmark "
                    "%d, with alpha=%r. Increase alpha or change the kernel "
                    "parameters." % (p + 1, self.alpha)) from error
            self.n_landmarks_ = p + 1

        self.dual_coef_ = solve_cholesky(self.factor_, self.AtY_[:m])
        self.timing_["train"] += time.time() - start
        return self

    def predict(self, X):
        """Predict with the current landmarks and coefficients.

        Parameters
        ----------
        X : array of shape (n_samples_test, n_features)
            Test samples.

        Returns
        -------
        Y_hat : array of shape (n_samples_test, n_targets)
        """
        return self._kernel(X, self.landmarks_) @ self.dual_coef_

    def training_predictions(self):
        """Predictions on the training samples, reusing the stored kernel."""
        return self.A_[:, :self.n_landmarks_] @ self.dual_coef_

    def _check_n_landmarks(self, n_landmarks, minimum):
        if not minimum <= n_landmarks <= self.max_landmarks:
            raise ValueError(
                "n_landmarks=%r must be in [%d, %d]." %
                (n_landmarks, minimum, self.max_landmarks))
