import sys
import time


def bar(iterable, title='', use_it=True):
    """Wrap an iterable in a command-line progress bar.

    Parameters
    ----------
    iterable : sized iterable
        Iterable driving the progress bar, one step per item.
    title : str
        Message displayed to the right of the bar.
    use_it : bool
        If False, the iterable is returned unchanged and nothing is printed.

    Examples
    --------
    >>> from nystrom_cv.progress_bar import bar
    >>> for alpha in bar([0.1, 1., 10.], title="alphas"):
    ...     pass
    """
    if not use_it:
        return iterable
    return ProgressBar(title=title, max_value=len(iterable))(iterable)


class ProgressBar():
    """Command-line progress bar, printed on a single refreshed line.

    Parameters
    ----------
    title : str
        Message displayed to the right of the bar.
    max_value : int
        Value at which the process is complete, e.g. the number of cells of
        a grid search.
    initial_value : int
        Starting value.
    max_chars : int
        Width of the bar, in characters.
    progress_character : str
        Character filling the completed part of the bar.
    verbose_bool : bool
        If False, the bar is tracked but never printed.
    """

    template = ('\r[{filled}{empty}] {percent:0.0f}% {elapsed:.02f} sec | '
                '{title}')

    def __init__(self, title='', max_value=None, initial_value=0, max_chars=40,
                 progress_character='.', verbose_bool=True):
        self.title = title
        self.max_value = max_value
        self.max_chars = max_chars
        self.progress_character = progress_character
        self.verbose_bool = verbose_bool
        self.start = time.time()
        self.closed = False

        self.cur_value = initial_value
        self.update(initial_value)

    @property
    def fraction(self):
        """Completed fraction, clipped to 1."""
        return min(float(self.cur_value) / (self.max_value or 1), 1.)

    def _write(self, text):
        if self.verbose_bool:
            sys.stdout.write(text)
            # pipes would only show it at exit otherwise
            sys.stdout.flush()

    def update(self, cur_value, title=None):
        """Set the current value, and refresh the bar.

        Parameters
        ----------
        cur_value : number
            Current value. The bar shows cur_value / max_value.
        title : str or None
            New message. If None, keep the previous one.
        """
        self.cur_value = cur_value
        if title is not None:
            self.title = title

        fraction = self.fraction
        n_filled = int(fraction * self.max_chars)
        self._write(
            self.template.format(
                filled=self.progress_character * n_filled,
                empty=' ' * (self.max_chars - n_filled),
                percent=fraction * 100, elapsed=time.time() - self.start,
                title=self.title))

        if fraction == 1:
            self.close()

    def update_with_increment_value(self, increment_value, title=None):
        """Increase the current value by ``increment_value``."""
        self.update(self.cur_value + increment_value, title)

    def close(self):
        """End the line of the bar. Calling it again has no effect."""
        if self.closed:
            return
        self._write('\n')
        self.closed = True

    def __call__(self, sequence):
        for item in sequence:
            yield item
            self.update_with_increment_value(1)
