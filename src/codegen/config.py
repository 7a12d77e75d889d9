"""Codegen configuration system.

A project descriptor is a JSON or YAML document (JSON is valid YAML) listing the
shared include fragments and the output tasks, plus optional generator options.
Supports environment variable substitution (${VAR}) in descriptor strings.

Example:
    includes:
      - templates/layout.j2
    outputs:
      - template: templates/page.j2
        input: data/page.json
        output: build/page.html
    options:
      strict_undefined: true

Project file discovery (in priority order):
1. CLI --project argument
2. ./codegen.json
3. ./codegen.yaml, ./codegen.yml
4. ./codegen.proj
"""

import logging
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from codegen.errors import ProjectError
from codegen.models.project import OutputTask, ProjectDescriptor

logger = logging.getLogger(__name__)

PROJECT_FILE_NAMES = ["codegen.json", "codegen.yaml", "codegen.yml", "codegen.proj"]

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass(frozen=True)
class GeneratorOptions:
    """Options threaded through the include merger and output renderer.

    Attributes:
        strict_undefined: Fail the render on undefined variables or keys
        autoescape: HTML-escape expression output
        trim_blocks: Remove the first newline after a block tag
        lstrip_blocks: Strip whitespace before a block tag
        keep_trailing_newline: Keep a template's final newline
        atomic_writes: Render into a temp file and rename it over the destination
        make_dirs: Create missing parent directories of destinations
        fail_fast: Halt at the first failing task
        root_variable: Name under which the whole input tree is exposed
    """

    strict_undefined: bool = False
    autoescape: bool = False
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    keep_trailing_newline: bool = True
    atomic_writes: bool = False
    make_dirs: bool = False
    fail_fast: bool = True
    root_variable: str = "root"

    def __post_init__(self) -> None:
        """Validate options."""
        if not isinstance(self.root_variable, str) or not self.root_variable.isidentifier():
            raise ValueError(f"Invalid root_variable: {self.root_variable!r}")

    def with_overrides(self, **overrides: Any) -> "GeneratorOptions":
        """Return a copy with the non-None overrides applied (CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in descriptor values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${BUILD_DIR}/index.html -> value of BUILD_DIR + /index.html

    Args:
        value: Descriptor value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Project File Discovery
# =============================================================================


def find_project_file(start_path: Path | None = None) -> Path | None:
    """Find a project descriptor in standard locations.

    Args:
        start_path: Directory to search (defaults to cwd)

    Returns:
        Path to the descriptor if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    for name in PROJECT_FILE_NAMES:
        candidate = start_path / name
        if candidate.is_file():
            return candidate

    return None


# =============================================================================
# Project Loading
# =============================================================================


def _lower_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Lowercase mapping keys (descriptor keys are case-insensitive)."""
    return {str(k).lower(): v for k, v in data.items()}


def _require_path(entry: dict[str, Any], key: str, index: int, source: str) -> Path:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise ProjectError(
            f"output #{index + 1} in project file '{source}' is missing '{key}'",
            path=source,
        )
    return Path(value)


def load_options_from_dict(data: dict[str, Any] | None) -> GeneratorOptions:
    """Build GeneratorOptions from a descriptor's options section.

    Raises:
        ValueError: On unknown option names or invalid values
    """
    if not data:
        return GeneratorOptions()

    known = {f.name for f in fields(GeneratorOptions)}
    options = _lower_keys(data)
    unknown = sorted(set(options) - known)
    if unknown:
        raise ValueError(f"Unknown option(s): {', '.join(unknown)}")

    return GeneratorOptions(**options)


def load_project_from_dict(
    data: dict[str, Any],
    source: Path | None = None,
) -> tuple[ProjectDescriptor, GeneratorOptions]:
    """Load a project descriptor from a dictionary.

    Args:
        data: Decoded descriptor document
        source: File the document was read from (for messages)

    Returns:
        Tuple of (ProjectDescriptor, GeneratorOptions)

    Raises:
        ProjectError: If the document does not describe a valid project
    """
    label = str(source) if source else "<project>"

    if not isinstance(data, dict):
        raise ProjectError(f"project file '{label}' must contain a mapping", path=source)

    try:
        data = substitute_env_vars(_lower_keys(data))
    except ValueError as e:
        raise ProjectError(f"failed to parse project file '{label}': {e}", path=source) from e

    includes = data.get("includes") or []
    if not isinstance(includes, list) or not all(isinstance(i, str) for i in includes):
        raise ProjectError(
            f"'includes' in project file '{label}' must be a list of paths",
            path=source,
        )

    outputs_data = data.get("outputs") or []
    if not isinstance(outputs_data, list):
        raise ProjectError(
            f"'outputs' in project file '{label}' must be a list",
            path=source,
        )

    outputs: list[OutputTask] = []
    for index, entry in enumerate(outputs_data):
        if not isinstance(entry, dict):
            raise ProjectError(
                f"output #{index + 1} in project file '{label}' must be a mapping",
                path=source,
            )
        entry = _lower_keys(entry)
        outputs.append(
            OutputTask(
                template=_require_path(entry, "template", index, label),
                input=_require_path(entry, "input", index, label),
                output=_require_path(entry, "output", index, label),
            )
        )

    try:
        options = load_options_from_dict(data.get("options"))
    except (TypeError, ValueError) as e:
        raise ProjectError(f"invalid options in project file '{label}': {e}", path=source) from e

    project = ProjectDescriptor(
        includes=[Path(p) for p in includes],
        outputs=outputs,
        source=source,
    )

    # Duplicate destinations are left to the author; the last task wins.
    for duplicate in project.duplicate_outputs():
        logger.warning("Output path targeted by more than one task: %s", duplicate)

    return project, options


def load_project(
    project_path: Path | None = None,
    auto_discover: bool = True,
) -> tuple[ProjectDescriptor, GeneratorOptions]:
    """Load a project descriptor from file.

    Args:
        project_path: Explicit path to the descriptor
        auto_discover: Whether to search for a descriptor if not specified

    Returns:
        Tuple of (ProjectDescriptor, GeneratorOptions)

    Raises:
        ProjectError: If no descriptor is found or it cannot be read or parsed
    """
    if project_path is not None:
        found_path = project_path
    elif auto_discover:
        found_path = find_project_file()
    else:
        found_path = None

    if found_path is None:
        raise ProjectError(
            f"no project file found (looked for {', '.join(PROJECT_FILE_NAMES)})"
        )

    try:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ProjectError(
            f"failed to read project file '{found_path}': {e}", path=found_path
        ) from e
    except yaml.YAMLError as e:
        raise ProjectError(
            f"failed to parse project file '{found_path}': {e}", path=found_path
        ) from e

    logger.debug("Loaded project from %s", found_path)
    return load_project_from_dict(data, source=found_path)
