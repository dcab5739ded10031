import sys
from pathlib import Path

# Ensure the src directory and the test helpers are on the Python path for imports
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / 'src'
TESTS = ROOT / 'tests'
for path in (SRC, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
