"""
pytest configuration for ticket_manager tests
"""
import sys
from pathlib import Path

# Repository root, so `ticket_manager` imports without an install
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))
