"""Pytest configuration"""

import logging
import sys
from pathlib import Path

# Add the project root and src directory to Python path so tests can import properly
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))


def pytest_configure(config):
    """Keep library chatter out of test output."""
    logging.getLogger("discord").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
