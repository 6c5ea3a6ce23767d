#!/usr/bin/env python
"""Run the bot's test suite through pytest.

Usage:
    python run_tests.py              # everything
    python run_tests.py unit         # tests/unit only
    python run_tests.py integration  # tests/integration only
    python run_tests.py -k quota     # any other pytest arguments pass through
"""

import subprocess
import sys

SUITES = {
    "unit": "tests/unit",
    "integration": "tests/integration",
}

args = sys.argv[1:]
if args and args[0] in SUITES:
    args = [SUITES[args[0]], "-v"] + args[1:]
elif not args:
    args = ["tests/", "-v"]

result = subprocess.run([sys.executable, "-m", "pytest"] + args)
sys.exit(result.returncode)
