"""Pytest configuration shared by all test suites"""

import sys
from pathlib import Path

# Add project root to path for myth_parallels imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
