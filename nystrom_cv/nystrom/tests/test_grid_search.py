import threading

import numpy as np
import pytest

from nystrom_cv.backend import set_backend
from nystrom_cv.backend import ALL_BACKENDS
from nystrom_cv.exceptions import ConfigurationError
from nystrom_cv.exceptions import DegenerateSplitError
from nystrom_cv.scoring import mean_squared_error
from nystrom_cv.utils import assert_array_almost_equal
from nystrom_cv.utils import generate_nonlinear_dataset

from nystrom_cv.nystrom import BestModelRecorder
from nystrom_cv.nystrom import IncrementalNystromState
from nystrom_cv.nystrom import NYSTROM_RIDGE_CV_SOLVERS
from nystrom_cv.nystrom import make_landmark_grid
from nystrom_cv.nystrom import solve_nystrom_ridge_cv_cholesky
from nystrom_cv.nystrom import solve_nystrom_ridge_cv_incremental


def _create_dataset(backend, n_samples=100, n_targets=2,
                    classification=False):
    X, Y = generate_nonlinear_dataset(n_samples=n_samples, n_features=3,
                                      n_targets=n_targets, noise=0.1,
                                      classification=classification,
                                      random_state=0)
    return X, Y


###############################################################################
# landmark grid


def test_make_landmark_grid():
    np.testing.assert_array_equal(
        make_landmark_grid(min_landmarks=10, max_landmarks=100,
                           n_landmark_steps=10), np.arange(10, 101, 10))

    # rounding half away from zero: linspace(1, 4, 3) = [1, 2.5, 4]
    np.testing.assert_array_equal(
        make_landmark_grid(min_landmarks=1, max_landmarks=4,
                           n_landmark_steps=3), [1, 3, 4])

    # a single step only uses the largest number of landmarks
    np.testing.assert_array_equal(
        make_landmark_grid(min_landmarks=5, max_landmarks=40,
                           n_landmark_steps=1), [40])

    # a fixed number of landmarks ignores the range
    np.testing.assert_array_equal(
        make_landmark_grid(n_landmarks=7, min_landmarks=10,
                           max_landmarks=100, n_landmark_steps=10), [7])


@pytest.mark.parametrize('params', [
    dict(),
    dict(min_landmarks=5, max_landmarks=10),
    dict(min_landmarks=1, max_landmarks=3, n_landmark_steps=5),
    dict(min_landmarks=10, max_landmarks=5, n_landmark_steps=2),
    dict(min_landmarks=0, max_landmarks=5, n_landmark_steps=2),
    dict(min_landmarks=1.5, max_landmarks=5, n_landmark_steps=2),
    dict(min_landmarks=1, max_landmarks=5, n_landmark_steps=0),
    dict(n_landmarks=0),
    dict(n_landmarks=True),
    dict(min_landmarks=10, max_landmarks=50, n_landmark_steps=5,
         n_samples_train=40),
    dict(n_landmarks=41, n_samples_train=40),
])
def test_make_landmark_grid_errors(params):
    with pytest.raises(ConfigurationError):
        make_landmark_grid(**params)


###############################################################################
# best model recorder


def test_best_model_recorder():
    backend = set_backend("numpy")
    best = BestModelRecorder()
    assert best.validation_error == np.inf
    assert best.is_empty

    dual_coef = backend.asarray(np.ones((3, 2)))
    landmarks = backend.asarray(np.zeros((3, 4)))
    assert best.consider(0.5, alpha=0.1, alpha_index=0, n_landmarks=3,
                         n_landmarks_index=1, dual_coef=dual_coef,
                         landmarks=landmarks)
    assert not best.is_empty

    # stored arrays are copies
    dual_coef[:] = 10
    assert_array_almost_equal(best.dual_coef, np.ones((3, 2)))

    # ties and NaN do not replace the best model
    assert not best.consider(0.5, alpha=1., alpha_index=1, n_landmarks=3,
                             n_landmarks_index=1, dual_coef=dual_coef,
                             landmarks=landmarks)
    assert not best.consider(np.nan, alpha=1., alpha_index=1, n_landmarks=3,
                             n_landmarks_index=1, dual_coef=dual_coef,
                             landmarks=landmarks)
    assert not best.consider(0.7, alpha=1., alpha_index=1, n_landmarks=3,
                             n_landmarks_index=1, dual_coef=dual_coef,
                             landmarks=landmarks)
    assert best.alpha == 0.1
    assert best.alpha_index == 0

    assert best.consider(0.2, alpha=1., alpha_index=1, n_landmarks=3,
                         n_landmarks_index=1, dual_coef=dual_coef,
                         landmarks=landmarks)
    assert best.validation_error == 0.2
    assert best.alpha == 1.
    assert_array_almost_equal(best.dual_coef, 10 * np.ones((3, 2)))


def test_best_model_recorder_threads():
    backend = set_backend("numpy")
    best = BestModelRecorder()
    errors = np.random.RandomState(0).rand(200)

    def submit(indices):
        for ii in indices:
            best.consider(errors[ii], alpha=ii, alpha_index=ii, n_landmarks=1,
                          n_landmarks_index=0,
                          dual_coef=backend.asarray([[float(ii)]]),
                          landmarks=backend.asarray([[0.]]))

    threads = [
        threading.Thread(target=submit, args=(range(start, 200, 4), ))
        for start in range(4)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert best.validation_error == errors.min()
    assert best.alpha_index == np.argmin(errors)
    assert_array_almost_equal(best.dual_coef, [[np.argmin(errors)]])


###############################################################################
# cross-validation solvers


@pytest.mark.parametrize('solver_name', ["incremental_cholesky", "cholesky"])
@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_grid_search_exhaustive(backend, solver_name):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)
    alphas = [1e-3, 1e-1]
    landmark_grid = [5, 10, 15, 20]

    solver = NYSTROM_RIDGE_CV_SOLVERS[solver_name]
    results = solver(X, Y, alphas=alphas, landmark_grid=landmark_grid,
                     progress_bar=False)

    errors = results.validation_errors
    assert errors.shape == (2, 4)
    assert not np.any(np.isnan(errors))
    assert results.training_errors is None

    # the best model is the first minimum, in row-major order
    best = results.best
    ii, jj = np.unravel_index(np.argmin(errors), errors.shape)
    assert (best.alpha_index, best.n_landmarks_index) == (ii, jj)
    assert best.alpha == alphas[ii]
    assert best.n_landmarks == landmark_grid[jj]
    assert best.validation_error == errors[ii, jj]
    assert best.dual_coef.shape == (best.n_landmarks, 2)
    assert_array_almost_equal(best.landmarks, backend.to_numpy(X)[:80][
        :best.n_landmarks])

    assert set(results.timing) == {
        "kernel_computation", "train", "eval", "total", "refit"
    }
    assert results.timing["total"] == (results.timing["train"] +
                                       results.timing["eval"])
    np.testing.assert_array_equal(results.landmark_grid, landmark_grid)
    np.testing.assert_array_equal(results.train_indices, np.arange(80))
    np.testing.assert_array_equal(results.validation_indices,
                                  np.arange(80, 100))
    assert results.refit_dual_coef is None


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_incremental_equals_cholesky(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)
    kwargs = dict(alphas=[1e-2, 1e-1, 1.], landmark_grid=[3, 8, 20, 40],
                  kernel_params=dict(sigma=1.), store_training_error=True,
                  progress_bar=False)

    results_1 = solve_nystrom_ridge_cv_incremental(X, Y, **kwargs)
    results_2 = solve_nystrom_ridge_cv_cholesky(X, Y, **kwargs)

    assert_array_almost_equal(results_1.validation_errors,
                              results_2.validation_errors, decimal=6)
    assert_array_almost_equal(results_1.training_errors,
                              results_2.training_errors, decimal=6)
    assert results_1.best.alpha_index == results_2.best.alpha_index
    assert results_1.best.n_landmarks == results_2.best.n_landmarks
    assert_array_almost_equal(results_1.best.dual_coef,
                              results_2.best.dual_coef, decimal=4)


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_single_step_equals_direct_fit(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    results = solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=[0.05], landmark_grid=[12], validation_fraction=0.25,
        progress_bar=False)

    X_np, Y_np = backend.to_numpy(X), backend.to_numpy(Y)
    state = IncrementalNystromState(
        backend.asarray(X_np[:75]), backend.asarray(Y_np[:75]), alpha=0.05,
        max_landmarks=12)
    state.initialize(12)
    Y_pred = state.predict(backend.asarray(X_np[75:]))

    assert_array_almost_equal(results.best.dual_coef, state.dual_coef_)
    assert_array_almost_equal(results.validation_errors[0, 0],
                              mean_squared_error(Y_np[75:], Y_pred))


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_training_errors(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    results = solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=[1e-3, 1.], landmark_grid=[5, 40],
        store_training_error=True, progress_bar=False)
    assert results.training_errors.shape == (2, 2)
    assert not np.any(np.isnan(results.training_errors))
    # more landmarks and less regularization fit the training set better
    assert results.training_errors[0, 1] < results.training_errors[1, 0]


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_shuffle_is_deterministic(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)
    kwargs = dict(alphas=[1e-2, 1e-1], landmark_grid=[5, 10], shuffle=True,
                  random_state=3, progress_bar=False)

    results_1 = solve_nystrom_ridge_cv_incremental(X, Y, **kwargs)
    results_2 = solve_nystrom_ridge_cv_incremental(X, Y, **kwargs)

    np.testing.assert_array_equal(results_1.train_indices,
                                  results_2.train_indices)
    assert_array_almost_equal(results_1.validation_errors,
                              results_2.validation_errors)
    assert_array_almost_equal(results_1.best.dual_coef,
                              results_2.best.dual_coef)

    # the landmarks are the first shuffled training samples
    X_np = backend.to_numpy(X)
    n_landmarks = results_1.best.n_landmarks
    assert_array_almost_equal(
        results_1.best.landmarks,
        X_np[results_1.train_indices[:n_landmarks]])


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_refit(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    results = solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=[1e-2, 1e-1], landmark_grid=[5, 10, 20], shuffle=True,
        random_state=0, refit=True, progress_bar=False)
    best = results.best
    assert results.refit_dual_coef.shape == (best.n_landmarks, 2)
    assert_array_almost_equal(results.refit_landmarks, best.landmarks)
    assert results.timing["refit"] >= 0

    # refit on all samples, training samples first
    order = np.concatenate(
        [results.train_indices, results.validation_indices])
    X_np, Y_np = backend.to_numpy(X), backend.to_numpy(Y)
    state = IncrementalNystromState(
        backend.asarray(X_np[order]), backend.asarray(Y_np[order]),
        alpha=best.alpha, max_landmarks=best.n_landmarks)
    state.initialize(best.n_landmarks)
    assert_array_almost_equal(results.refit_dual_coef, state.dual_coef_)


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_classification(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend, n_targets=3, classification=True)

    results = solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=[1e-2, 1e-1], landmark_grid=[10, 30],
        error_func="misclassification_error", coding_func="argmax",
        progress_bar=False)
    errors = results.validation_errors
    assert np.all(errors >= 0)
    assert np.all(errors <= 1)
    # errors are multiples of 1 / n_samples_validation
    assert_array_almost_equal(errors * 20, np.round(errors * 20))


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_custom_error_function(backend):
    backend = set_backend(backend)
    X, Y = _create_dataset(backend)

    def constant_error(Y_true, Y_pred):
        return 1.

    results = solve_nystrom_ridge_cv_incremental(
        X, Y, alphas=[1e-2, 1e-1], landmark_grid=[5, 10],
        error_func=constant_error, progress_bar=False)
    # ties keep the first cell
    assert results.best.alpha_index == 0
    assert results.best.n_landmarks_index == 0


@pytest.mark.parametrize('params, error', [
    (dict(alphas=[]), ConfigurationError),
    (dict(alphas=[-1.]), ConfigurationError),
    (dict(alphas=[np.nan]), ConfigurationError),
    (dict(landmark_grid=[]), ConfigurationError),
    (dict(landmark_grid=[10, 5]), ConfigurationError),
    (dict(landmark_grid=[5, 5]), ConfigurationError),
    (dict(landmark_grid=[0, 5]), ConfigurationError),
    (dict(landmark_grid=[2.5]), ConfigurationError),
    (dict(landmark_grid=[81]), ConfigurationError),
    (dict(error_func="wrong"), ConfigurationError),
    (dict(coding_func=1), ConfigurationError),
    (dict(kernel="wrong"), ConfigurationError),
    (dict(validation_fraction=0), DegenerateSplitError),
    (dict(validation_fraction=1.2), ConfigurationError),
])
def test_grid_search_errors(params, error):
    backend = set_backend("numpy")
    X, Y = _create_dataset(backend)
    kwargs = dict(alphas=[0.1], landmark_grid=[5], progress_bar=False)
    kwargs.update(params)

    with pytest.raises(error):
        solve_nystrom_ridge_cv_incremental(X, Y, **kwargs)


def test_grid_search_wrong_shapes():
    backend = set_backend("numpy")
    X, Y = _create_dataset(backend)
    with pytest.raises(ValueError):
        solve_nystrom_ridge_cv_incremental(X, Y[:50], progress_bar=False)
    with pytest.raises(ValueError):
        solve_nystrom_ridge_cv_incremental(X, Y[:, 0], progress_bar=False)


def test_progress_bar(capsys):
    backend = set_backend("numpy")
    X, Y = _create_dataset(backend)
    solve_nystrom_ridge_cv_incremental(X, Y, alphas=[0.1, 1.],
                                       landmark_grid=[5], progress_bar=True)
    assert "2 alphas x 1 landmark steps" in capsys.readouterr().out
