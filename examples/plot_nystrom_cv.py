"""
Nystrom kernel ridge with incremental cross-validation
======================================================
This example demonstrates how to select both the regularization parameter and
the number of landmarks of a Nystrom kernel ridge regression, with the solver
``solve_nystrom_ridge_cv_incremental``.
"""

import numpy as np
import matplotlib.pyplot as plt

from nystrom_cv.backend import set_backend
from nystrom_cv.nystrom import make_landmark_grid
from nystrom_cv.nystrom import solve_nystrom_ridge_cv_cholesky
from nystrom_cv.nystrom import solve_nystrom_ridge_cv_incremental
from nystrom_cv.utils import generate_nonlinear_dataset
from nystrom_cv.viz import plot_error_path

print(__doc__)

###############################################################################
# In this example, we use the numpy backend. Use "torch_cuda" or "cupy" to run
# the computations on GPU.

backend = set_backend("numpy", on_error="warn")

###############################################################################
# Generate a nonlinear dataset.

X, Y = generate_nonlinear_dataset(n_samples=3000, n_features=5, n_targets=2,
                                  noise=0.1, random_state=0)

###############################################################################
# Define the grid of hyperparameters. The landmarks are the first training
# samples, so the number of landmarks grows along ``landmark_grid``.

alphas = np.logspace(-6, -1, 6)
landmark_grid = make_landmark_grid(min_landmarks=20, max_landmarks=600,
                                   n_landmark_steps=30)

###############################################################################
# Run the grid search. For each alpha, the Cholesky factor of the regularized
# Gram matrix is updated when new landmarks are added, instead of being
# recomputed from scratch.

results = solve_nystrom_ridge_cv_incremental(
    X, Y, alphas=alphas, landmark_grid=landmark_grid,
    kernel_params=dict(sigma=1.), validation_fraction=0.2, shuffle=True,
    random_state=0, refit=True)

best = results.best
print("best alpha: %.2g" % best.alpha)
print("best number of landmarks: %d" % best.n_landmarks)
print("best validation error: %.4f" % best.validation_error)

###############################################################################
# Compare the training time with a new factorization at each grid cell.

results_direct = solve_nystrom_ridge_cv_cholesky(
    X, Y, alphas=alphas, landmark_grid=landmark_grid,
    kernel_params=dict(sigma=1.), validation_fraction=0.2, shuffle=True,
    random_state=0, refit=False)

for name, res in [("incremental", results), ("direct", results_direct)]:
    print("%s: kernel %.2f sec, train %.2f sec, eval %.2f sec" %
          (name, res.timing["kernel_computation"], res.timing["train"],
           res.timing["eval"]))

###############################################################################
# Plot the validation error path.

ax = plot_error_path(results.validation_errors, alphas, landmark_grid)
ax.set_yscale("log")
ax.set_title("Validation error of Nystrom kernel ridge")
plt.tight_layout()
plt.show()
