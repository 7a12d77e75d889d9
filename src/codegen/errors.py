"""Error taxonomy for the generation pipeline.

Every failure raised by the core names the file it concerns and the phase
that failed, so the CLI can report it without further diagnostics:
- FileAccessError: a path could not be read or a destination could not be created
- ParseError: malformed JSON, template syntax, duplicate definitions, clone failure
- RenderError: execution-time failure while binding input data to a template
"""

from enum import Enum
from pathlib import Path


class Phase(Enum):
    """Pipeline phase in which an error occurred."""

    READ = "read"
    PARSE_INCLUDE = "parse-include"
    PARSE_TEMPLATE = "parse-output-template"
    DECODE_INPUT = "decode-input"
    CLONE = "clone"
    CREATE_OUTPUT = "create-output"
    RENDER = "render"


class CodegenError(Exception):
    """Base class for all pipeline failures."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        phase: Phase | None = None,
    ) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        self.phase = phase
        super().__init__(message)

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON log output."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "phase": self.phase.value if self.phase else None,
        }


class FileAccessError(CodegenError):
    """Raised when a file cannot be read or a destination cannot be created."""


class ParseError(CodegenError):
    """Raised when a template, include or input file cannot be parsed."""


class RenderError(CodegenError):
    """Raised when template execution fails."""


class ProjectError(CodegenError):
    """Raised when the project descriptor is missing or malformed."""


class BatchError(CodegenError):
    """Raised in keep-going mode when one or more tasks failed.

    Attributes:
        errors: Individual task failures in task order
        completed: Output paths written successfully
    """

    def __init__(
        self,
        errors: list[CodegenError],
        completed: list[Path] | None = None,
    ) -> None:
        self.errors = errors
        self.completed = completed or []
        lines = [f"{len(errors)} output(s) failed:"]
        lines.extend(f"  {error}" for error in errors)
        super().__init__("\n".join(lines))
