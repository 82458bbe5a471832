import subprocess
import sys

import pytest


@pytest.mark.extra
def test_mypy():
    """ Type-check the package with mypy """
    res = subprocess.run([sys.executable, '-m', 'mypy', 'prestql'])
    if res.returncode != 0:
        raise AssertionError('MyPy type checking failed')
