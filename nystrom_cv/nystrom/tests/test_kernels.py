import numpy as np
import pytest
import sklearn.metrics.pairwise

from nystrom_cv.backend import set_backend
from nystrom_cv.backend import ALL_BACKENDS
from nystrom_cv.exceptions import ConfigurationError
from nystrom_cv.utils import assert_array_almost_equal

from nystrom_cv.nystrom import PAIRWISE_KERNEL_FUNCTIONS
from nystrom_cv.nystrom import pairwise_kernels
from nystrom_cv.nystrom._kernels import euclidean_distances


def _create_dataset(backend):
    X = backend.asarray(backend.randn(10, 4), backend.float64)
    Y = backend.asarray(backend.randn(6, 4), backend.float64)
    return X, Y


@pytest.mark.parametrize('kernel', [
    'rbf', 'laplacian', 'linear', 'polynomial', 'poly'
])
@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_kernels_vs_scikit_learn(backend, kernel):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    K = pairwise_kernels(X, Y, metric=kernel)
    reference = sklearn.metrics.pairwise.pairwise_kernels(
        backend.to_numpy(X), backend.to_numpy(Y), metric=kernel)
    assert_array_almost_equal(K, reference)

    # Y defaults to X
    K = pairwise_kernels(X, metric=kernel)
    reference = sklearn.metrics.pairwise.pairwise_kernels(
        backend.to_numpy(X), metric=kernel)
    assert_array_almost_equal(K, reference)


@pytest.mark.parametrize('sigma', [0.5, 1., 3.])
@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_gaussian_kernel(backend, sigma):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    K = pairwise_kernels(X, Y, metric="gaussian", sigma=sigma)
    X_np, Y_np = backend.to_numpy(X), backend.to_numpy(Y)
    squared = ((X_np[:, None] - Y_np[None]) ** 2).sum(-1)
    assert_array_almost_equal(K, np.exp(-squared / (2 * sigma ** 2)))

    # diagonal of K(X, X) is one
    K = pairwise_kernels(X, metric="gaussian", sigma=sigma)
    assert_array_almost_equal(np.diag(backend.to_numpy(K)), np.ones(10))

    with pytest.raises(ConfigurationError):
        pairwise_kernels(X, Y, metric="gaussian", sigma=0)


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_euclidean_distances(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    D = euclidean_distances(X, Y)
    reference = sklearn.metrics.pairwise.euclidean_distances(
        backend.to_numpy(X), backend.to_numpy(Y))
    assert_array_almost_equal(D, reference)

    # no negative squared distances from rounding errors
    D = euclidean_distances(X, squared=True)
    assert np.all(backend.to_numpy(D) >= 0)


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_callable_kernel(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    def kernel(X, Y, scale=1.):
        return scale * (X @ Y.T)

    K = pairwise_kernels(X, Y, metric=kernel, scale=2.)
    assert_array_almost_equal(K, 2 * backend.to_numpy(X @ Y.T))

    def wrong_kernel(X, Y):
        return X @ X.T

    with pytest.raises(ValueError, match="shape"):
        pairwise_kernels(X, Y, metric=wrong_kernel)


def test_unknown_kernel():
    set_backend("numpy")
    X = np.random.randn(4, 2)
    with pytest.raises(ConfigurationError):
        pairwise_kernels(X, X, metric="wrong")
    with pytest.raises(ValueError, match="Incompatible dimension"):
        pairwise_kernels(X, np.random.randn(4, 3), metric="linear")


def test_kernel_names():
    assert set(PAIRWISE_KERNEL_FUNCTIONS) == {
        'gaussian', 'rbf', 'laplacian', 'linear', 'polynomial', 'poly'
    }
