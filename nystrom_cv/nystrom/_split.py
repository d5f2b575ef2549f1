import math
import numbers

import numpy as np

from ..exceptions import ConfigurationError
from ..exceptions import DegenerateSplitError
from ..validation import check_random_state


def train_validation_split(n_samples, validation_fraction=0.2, shuffle=False,
                           random_state=None):
    """Split the indices of a training set into a training and a validation
    part.

    The first ``floor(n_samples * (1 - validation_fraction))`` indices form
    the training part, the remaining ones the validation part. If shuffle is
    True, the indices are randomly permuted before being cut.

    Parameters
    ----------
    n_samples : int
        Number of samples in the training set.
    validation_fraction : float in ]0, 1[
        Fraction of the samples used for validation.
    shuffle : bool
        Whether to randomly permute the indices before the split.
    random_state : int, np.random.RandomState, or None
        Random generator seed, used only if shuffle is True.

    Returns
    -------
    train_indices : array of shape (n_samples_train, )
        Indices of the training part.
    validation_indices : array of shape (n_samples - n_samples_train, )
        Indices of the validation part. Together with ``train_indices``, it
        forms a permutation of ``range(n_samples)``.
    """
    if not isinstance(n_samples, numbers.Integral) or n_samples < 0:
        raise ValueError("n_samples must be a non-negative integer, got %r."
                         % (n_samples, ))
    if not isinstance(validation_fraction, numbers.Real):
        raise ConfigurationError("validation_fraction must be a float, got "
                                 "%r." % (validation_fraction, ))
    if validation_fraction in (0, 1):
        raise DegenerateSplitError(
            "validation_fraction=%r leads to an empty %s set." %
            (validation_fraction,
             "validation" if validation_fraction == 0 else "training"))
    if not 0 < validation_fraction < 1:
        raise ConfigurationError(
            "validation_fraction must be in ]0, 1[, got %r." %
            (validation_fraction, ))

    n_samples_train = int(math.floor(n_samples * (1 - validation_fraction)))
    if n_samples_train == 0 or n_samples_train == n_samples:
        raise DegenerateSplitError(
            "Cannot split %d samples with validation_fraction=%r: the %s set "
            "would be empty." % (n_samples, validation_fraction,
                                 "training" if n_samples_train == 0 else
                                 "validation"))

    if shuffle:
        indices = check_random_state(random_state).permutation(n_samples)
    else:
        indices = np.arange(n_samples)

    return indices[:n_samples_train], indices[n_samples_train:]
