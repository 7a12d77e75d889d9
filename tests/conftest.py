"""Shared pytest fixtures for codegen tests.

Fixtures are organized by category:
- Logging: reset the codegen logger between tests
- File helpers: write templates, fragments and JSON inputs into tmp_path
- Project fixtures: a working copy of the sample project
"""

import json
import logging
import shutil
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from codegen.models import OutputTask
from tests.fixtures import SAMPLE_PROJECT_PATH

# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def reset_codegen_logger() -> Iterator[None]:
    """Drop handlers installed by CLI invocations."""
    yield
    logger = logging.getLogger("codegen")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# File Helpers
# =============================================================================


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a text file under tmp_path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_json(write_file: Callable[[str, str], Path]) -> Callable[[str, Any], Path]:
    """Return a helper that writes a JSON input file under tmp_path."""

    def _write(name: str, data: Any) -> Path:
        return write_file(name, json.dumps(data))

    return _write


@pytest.fixture
def make_task(tmp_path: Path) -> Callable[[str, str, str], OutputTask]:
    """Return a helper building an OutputTask from names under tmp_path."""

    def _make(template: str, input: str, output: str) -> OutputTask:
        return OutputTask(
            template=tmp_path / template,
            input=tmp_path / input,
            output=tmp_path / output,
        )

    return _make


# =============================================================================
# Project Fixtures
# =============================================================================


@pytest.fixture
def sample_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Copy the sample project into tmp_path and chdir into it.

    Descriptor paths are relative, so runs resolve against the copy.
    """
    project_dir = tmp_path / "sample_project"
    shutil.copytree(SAMPLE_PROJECT_PATH, project_dir)
    monkeypatch.chdir(project_dir)
    return project_dir
