#!/usr/bin/env python3
"""
Run the strider test suite.

Usage:
    python run_tests.py                  # whole suite
    python run_tests.py tests/test_linalg.py -k inverse
    python run_tests.py --no-torch       # skip the torch backend tests
"""

import os
import sys

REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, REPO_ROOT)


def main(argv):
    import pytest
    from strider import available_backends

    extra = list(argv)
    args = ['-v', '--tb=short']
    if '--no-torch' in extra:
        extra.remove('--no-torch')
        args += ['-k', 'not TestTorchBackend']

    print(f"matmul backends: {', '.join(available_backends())}")
    if not any(not a.startswith('-') for a in extra):
        args.insert(0, os.path.join(REPO_ROOT, 'tests'))
    return pytest.main(args + extra)


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
