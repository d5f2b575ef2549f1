"""
Nystrom kernel ridge with scikit-learn API
==========================================
This example demonstrates how to fit a Nystrom kernel ridge regression with
cross-validation of the hyperparameters, using the estimator
``NystromKernelRidgeCV``, in a scikit-learn pipeline.
"""

import numpy as np
import matplotlib.pyplot as plt
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from nystrom_cv.backend import set_backend
from nystrom_cv.nystrom import NystromKernelRidgeCV
from nystrom_cv.utils import generate_nonlinear_dataset

print(__doc__)

###############################################################################
# In this example, we use the numpy backend.

backend = set_backend("numpy", on_error="warn")

###############################################################################
# Generate a nonlinear dataset, with a train/test split.

X, Y = generate_nonlinear_dataset(n_samples=2000, n_features=4, n_targets=3,
                                  noise=0.1, random_state=0)
X_train, X_test = X[:1500], X[1500:]
Y_train, Y_test = Y[:1500], Y[1500:]

###############################################################################
# Define the model. The number of landmarks is selected between 10 and 400,
# in 20 steps, together with the regularization parameter.

model = NystromKernelRidgeCV(alphas=np.logspace(-6, 0, 7), min_landmarks=10,
                             max_landmarks=400, n_landmark_steps=20,
                             kernel="gaussian", kernel_params=dict(sigma=1.5),
                             shuffle=True, random_state=0, progress_bar=True)
pipe = make_pipeline(StandardScaler(), model)

###############################################################################
# Fit the model, and score it on the test set.

pipe.fit(X_train, Y_train)
scores = pipe.score(X_test, Y_test)
scores = backend.to_numpy(scores)
print("test R2 scores:", scores)
print("selected alpha: %.2g" % model.best_alpha_)
print("selected number of landmarks: %d" % model.best_n_landmarks_)

###############################################################################
# Plot the cross-validation errors over the grid.

fig, ax = plt.subplots()
image = ax.imshow(np.log10(model.cv_errors_), aspect="auto")
ax.set_xticks(range(len(model.landmark_grid_))[::4])
ax.set_xticklabels(model.landmark_grid_[::4])
ax.set_yticks(range(len(model.alphas)))
ax.set_yticklabels(["%.0e" % alpha for alpha in model.alphas])
ax.set_xlabel("Number of landmarks")
ax.set_ylabel("alpha")
fig.colorbar(image, label="log10(validation error)")
plt.show()
