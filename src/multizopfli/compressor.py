"""zopflipng invocation for a single file."""

import logging
import os
from collections.abc import Callable
from functools import partial

import click
import sh

from multizopfli.errors import CompressionError, CompressorNotFound
from multizopfli.models import OutputMode, RunOptions
from multizopfli.utils import display_size, human_readable_size


logger = logging.getLogger(__name__)

OVERWRITE_FLAG = '-y'
TEMP_SUFFIX = '.optimized'


def build_flags(
    more: bool = False,
    lossy_transparent: bool = False,
    lossy_8bit: bool = False,
    quick: bool = False,
    iterations: int = -1,
    filters: str = '',
    keepchunks: str = '',
) -> tuple[str, ...]:
    """Build the zopflipng flag set shared by every file of a run.

    Values are passed through unvalidated; -1 iterations and empty strings
    mean "let zopflipng decide".
    """
    flags: list[str] = []
    if more:
        flags.append('-m')
    if lossy_transparent:
        flags.append('--lossy_transparent')
    if lossy_8bit:
        flags.append('--lossy_8bit')
    if quick:
        flags.append('-q')
    if iterations != -1:
        flags.append(f'--iterations={iterations}')
    if filters:
        flags.append(f'--filters={filters}')
    if keepchunks:
        flags.append(f'--keepchunks={keepchunks}')
    return tuple(flags)


def temp_output_path(path: str) -> str:
    """Sibling path zopflipng writes to in temp mode: a.png -> a.optimized.png"""
    root, ext = os.path.splitext(path)
    return f'{root}{TEMP_SUFFIX}{ext}'


class Compressor:
    """Runs zopflipng on one file at a time.

    One instance is shared by all worker threads; it holds no per-file state.
    """

    def __init__(self, options: RunOptions, echo: Callable[[str], None] | None = None):
        self.options = options
        self.echo = echo or partial(click.echo, err=True)
        try:
            self.command = sh.Command(options.executable)
        except sh.CommandNotFound as e:
            raise CompressorNotFound(
                f'zopflipng executable not found: {options.executable}. '
                'Install zopfli (e.g. apt install zopfli, brew install zopfli) or pass --zopflipng.'
            ) from e
        logger.debug(f'Using zopflipng at {self.command._path}')

    def build_args(self, path: str) -> list[str]:
        """Per-file argument list: [flags..., -y, input, output]"""
        output = path if self.options.mode == OutputMode.IN_PLACE else temp_output_path(path)
        return [*self.options.flags, OVERWRITE_FLAG, path, output]

    def compress(self, path: str, before_size: int) -> int:
        """Compress one file and return its new size in bytes.

        In temp mode the sibling output replaces the input on success. A
        failed run may leave the input truncated (in-place) or the sibling
        file behind (temp); neither is rolled back here.

        Raises:
            CompressionError: zopflipng failed or the result could not be measured
        """
        args = self.build_args(path)
        self.echo(' '.join(['>', os.path.basename(str(self.command._path)), *args]))
        self.echo(f'Optimizing [{human_readable_size(before_size)}] {path}')

        try:
            self.command(*args)
            if self.options.mode == OutputMode.TEMP:
                os.replace(args[-1], path)
            after_size = os.stat(path).st_size
        except (sh.ErrorReturnCode, OSError) as e:
            logger.debug(f'zopflipng failed for {path}: {e}')
            raise CompressionError(path, e) from e

        self.echo(f'Optimized [{display_size(before_size, after_size)}] {path}')
        return after_size
