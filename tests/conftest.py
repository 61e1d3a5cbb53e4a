"""Pytest configuration and shared fixtures for multizopfli tests.

Provides environment isolation and a fake zopflipng executable whose
behaviour is driven by a JSON file written next to it.
"""

import json
import os
import stat
import sys
import textwrap

import pytest


FAKE_ZOPFLIPNG = textwrap.dedent(
    '''\
    #!{python}
    import json
    import os
    import sys
    import time

    here = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(here, 'behavior.json')) as f:
        behavior = json.load(f)

    with open(os.path.join(here, 'calls.log'), 'a') as f:
        f.write(json.dumps(sys.argv[1:]) + '\\n')

    src, dst = sys.argv[-2], sys.argv[-1]
    marker = os.path.join(here, 'running', str(os.getpid()))
    open(marker, 'w').close()
    try:
        with open(os.path.join(here, 'highwater.log'), 'a') as f:
            f.write(f"{{len(os.listdir(os.path.join(here, 'running')))}}\\n")
        time.sleep(behavior.get('delay', 0))
        target = behavior['files'].get(os.path.basename(src), 'fail')
        if target == 'fail':
            sys.stderr.write(f'cannot optimize {{src}}\\n')
            sys.exit(1)
        with open(dst, 'wb') as f:
            f.write(b'\\x00' * target)
    finally:
        os.remove(marker)
    '''
)


class FakeZopflipng:
    """Handle on a generated zopflipng stand-in."""

    def __init__(self, directory):
        self.directory = directory
        self.path = str(directory / 'zopflipng')
        (directory / 'running').mkdir()
        with open(self.path, 'w') as f:
            f.write(FAKE_ZOPFLIPNG.format(python=sys.executable))
        os.chmod(self.path, os.stat(self.path).st_mode | stat.S_IEXEC)
        self.configure({})

    def configure(self, files: dict, delay: float = 0.0):
        """files maps basename -> resulting size in bytes, or 'fail'."""
        with open(self.directory / 'behavior.json', 'w') as f:
            json.dump({'files': files, 'delay': delay}, f)

    @property
    def calls(self) -> list[list[str]]:
        log = self.directory / 'calls.log'
        if not log.exists():
            return []
        return [json.loads(line) for line in log.read_text().splitlines()]

    @property
    def high_water(self) -> int:
        log = self.directory / 'highwater.log'
        if not log.exists():
            return 0
        return max(int(line) for line in log.read_text().splitlines())


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that keeps MULTIZOPFLI_* variables from leaking into tests."""
    for key in ('MULTIZOPFLI_CONCURRENCY', 'MULTIZOPFLI_ZOPFLIPNG', 'MULTIZOPFLI_LOG_LEVEL'):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_zopflipng(tmp_path):
    """A fake zopflipng executable in its own directory."""
    tool_dir = tmp_path / 'tool'
    tool_dir.mkdir()
    return FakeZopflipng(tool_dir)


@pytest.fixture
def image_dir(tmp_path):
    """Empty directory for test images."""
    images = tmp_path / 'images'
    images.mkdir()
    return images


@pytest.fixture
def make_file(image_dir):
    """Factory creating a file of exactly `size` bytes under image_dir, returning its path."""

    def _make(name: str, size: int) -> str:
        path = image_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b'\x89' * size)
        return str(path)

    return _make
