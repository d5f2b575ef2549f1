import numpy as np


def plot_error_path(validation_errors, alphas, landmark_grid, ax=None):
    """
    Plot the validation error against the number of landmarks, with one
    curve per regularization parameter, to check that the grid search covers
    the minimum of the error.

    Parameters
    ----------
    validation_errors : array of shape (n_alphas, n_steps)
        Validation errors of the grid search. NaN cells are not drawn.
    alphas : array of shape (n_alphas, )
        Regularization parameters of the grid.
    landmark_grid : array of shape (n_steps, )
        Numbers of landmarks of the grid.
    ax : None or figure axis

    Returns
    -------
    ax : figure axis
    """
    import matplotlib.pyplot as plt
    validation_errors = np.asarray(validation_errors, dtype=float)
    alphas = np.atleast_1d(alphas)
    landmark_grid = np.atleast_1d(landmark_grid)
    if validation_errors.shape != (len(alphas), len(landmark_grid)):
        raise ValueError(
            "validation_errors has shape %s, expected %s." %
            (validation_errors.shape, (len(alphas), len(landmark_grid))))

    if ax is None:
        fig, ax = plt.subplots(1, 1)

    for alpha, errors in zip(alphas, validation_errors):
        ax.plot(landmark_grid, errors, '.-', markersize=12,
                label='alpha=%.3g' % alpha)
    ax.set_ylabel('Validation error')
    ax.set_xlabel('Number of landmarks')
    ax.legend()
    ax.grid("on")
    return ax
