"""multizopfli - parallel zopflipng runner for batches of PNG files."""

from multizopfli.__version__ import __version__


__all__ = ['__version__']
