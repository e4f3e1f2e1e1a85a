import os
import sys
from pathlib import Path

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Tests assume the default algorithm regardless of the developer's .env
os.environ["MERKLE_HASH_ALGORITHM"] = "sha256"
os.environ.setdefault("MERKLE_LOG_LEVEL", "WARNING")
