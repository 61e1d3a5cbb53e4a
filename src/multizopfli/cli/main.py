"""Main CLI entry point"""

import json
import sys

import click

from multizopfli.__version__ import __version__
from multizopfli.compressor import build_flags
from multizopfli.errors import MultizopfliError
from multizopfli.models import OutputMode, RunOptions
from multizopfli.runner import optimize
from multizopfli.utils import ZOPFLIPNG_ENV, default_concurrency, get_str_env, setup_logging


FILTERS_HELP = (
    'Filter strategies to try: 0-4 give all scanlines PNG filter type 0-4, m minimum sum, e entropy, '
    'p predefined (keep from input), b brute force (experimental). '
    'By default the strategy most likely to be best is picked by trying faster compression with each type. '
    'A good set to try is --filters=0me.'
)

KEEPCHUNKS_HELP = (
    'Keep metadata chunks with these names that would normally be removed, e.g. tEXt,zTXt,iTXt,gAMA. '
    'By default only IHDR, PLTE, tRNS, IDAT and IEND are kept.'
)


@click.command('multizopfli')
@click.argument('glob_pattern', metavar='GLOB')
@click.option(
    '--concurrency',
    '-c',
    type=click.IntRange(min=1),
    default=default_concurrency,
    show_default='half the CPU count, rounded up',
    help='Number of parallel processes to run',
)
@click.option('-m', 'more', is_flag=True, help='Compress more: use more iterations (depending on file size)')
@click.option(
    '--lossy_transparent',
    is_flag=True,
    help='Remove colors behind alpha channel 0. No visual difference, removes hidden information.',
)
@click.option('--lossy_8bit', is_flag=True, help='Convert 16-bit per channel image to 8-bit per channel.')
@click.option('-q', 'quick', is_flag=True, help='Use quick, but not very good, compression')
@click.option(
    '--iterations',
    type=int,
    default=-1,
    help='Number of iterations. Default (-1): 15 for small files, 5 for large files.',
)
@click.option('--filters', default='', help=FILTERS_HELP)
@click.option('--keepchunks', default='', help=KEEPCHUNKS_HELP)
@click.option(
    '--mode',
    type=click.Choice([m.value for m in OutputMode]),
    default=OutputMode.IN_PLACE.value,
    show_default=True,
    help='in-place: overwrite each file directly. temp: write NAME.optimized.png, then move it over NAME.png.',
)
@click.option(
    '--zopflipng',
    'executable',
    default=lambda: get_str_env(ZOPFLIPNG_ENV, 'zopflipng'),
    help=f'zopflipng executable (default: ${ZOPFLIPNG_ENV} or zopflipng on PATH)',
)
@click.option('--json', 'json_output', is_flag=True, help='Print the final summary as JSON on stdout')
@click.version_option(version=__version__, prog_name='multizopfli')
def cli(
    glob_pattern: str,
    concurrency: int,
    more: bool,
    lossy_transparent: bool,
    lossy_8bit: bool,
    quick: bool,
    iterations: int,
    filters: str,
    keepchunks: str,
    mode: str,
    executable: str,
    json_output: bool,
):
    """Losslessly optimize PNG files matching GLOB with zopflipng, several at a time.

    Progress and totals are written to stderr.

    \b
    Examples:
        multizopfli "images/**/*.png"
        multizopfli "assets/*.png" -c 2 -m --filters=0me
        multizopfli "*.png" --mode temp --json
    """
    options = RunOptions(
        concurrency=concurrency,
        flags=build_flags(
            more=more,
            lossy_transparent=lossy_transparent,
            lossy_8bit=lossy_8bit,
            quick=quick,
            iterations=iterations,
            filters=filters,
            keepchunks=keepchunks,
        ),
        mode=OutputMode(mode),
        executable=executable,
    )

    try:
        summary = optimize(glob_pattern, options)
    except MultizopfliError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(summary.model_dump(), indent=2))

    # Exit with error if any failures
    if not summary.ok:
        sys.exit(1)


def main():
    """Entry point for the CLI"""
    setup_logging()
    cli()


if __name__ == '__main__':
    main()
