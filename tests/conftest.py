"""Shared pytest fixtures for protected options protocol tests."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Import all fixtures for global availability
from tests.fixtures.protocol_fixtures import *
