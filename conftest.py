"""
Pytest configuration: project root on sys.path, no real credentials picked up from env files.
"""
import os
import sys
from pathlib import Path

root = Path(__file__).resolve().parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

# load_env() never overrides variables that already exist, so blank these before backend imports
for key in ("OPENAI_API_KEY", "GITHUB_TOKEN"):
    os.environ[key] = ""
