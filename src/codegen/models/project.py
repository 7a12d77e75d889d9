"""Project entities.

This module contains the entities a project descriptor is loaded into:
- OutputTask: One template/input/output triple
- ProjectDescriptor: Shared include fragments plus the ordered output tasks
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class OutputTask:
    """Single output file generation task.

    Attributes:
        template: Path to the output's own template file
        input: Path to the JSON file with the data for the template
        output: Path where the rendered file is written
    """

    template: Path
    input: Path
    output: Path


@dataclass
class ProjectDescriptor:
    """Declarative description of a generation run.

    Attributes:
        includes: Fragment files parsed once into the shared namespace
        outputs: Output tasks in execution order
        source: Descriptor file this project was loaded from
    """

    includes: list[Path] = field(default_factory=list)
    outputs: list[OutputTask] = field(default_factory=list)
    source: Path | None = None

    def duplicate_outputs(self) -> list[Path]:
        """Return output paths targeted by more than one task."""
        counts = Counter(task.output for task in self.outputs)
        return [path for path, count in counts.items() if count > 1]
