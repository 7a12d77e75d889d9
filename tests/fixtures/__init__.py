"""Test fixtures for codegen.

Sample Projects:
- sample_project: Two HTML pages sharing a layout and a macro library
"""

from pathlib import Path

FIXTURES_DIR = Path(__file__).parent

SAMPLE_PROJECT_PATH = FIXTURES_DIR / "sample_project"
