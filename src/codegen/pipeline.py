"""Generation pipeline orchestrator.

Runs the include merger once, then the output renderer over every task.
"""

import logging
from pathlib import Path

from codegen.config import GeneratorOptions
from codegen.errors import BatchError, ProjectError
from codegen.models import OutputTask, ProjectDescriptor
from codegen.templates import Namespace, OutputRenderer, RunResult, build_base, create_environment

logger = logging.getLogger(__name__)


class GenerationPipeline:
    """Builds the base namespace and renders a project's outputs.

    The pipeline sequence:
    1. Parse include fragments into the frozen base namespace
    2. Render each output task against its own clone of the base

    Usage:
        pipeline = GenerationPipeline(options)
        result = pipeline.run(project)
    """

    def __init__(
        self,
        options: GeneratorOptions | None = None,
        search_path: Path | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            options: Generator options (uses defaults if None)
            search_path: Directory for template {% include %} lookups (defaults to cwd)
        """
        self.options = options or GeneratorOptions()
        self._environment = create_environment(self.options, search_path)

    def build_base(self, project: ProjectDescriptor) -> Namespace:
        """Parse the project's include fragments."""
        return build_base(project.includes, self.options, self._environment)

    def _renderer(self, project: ProjectDescriptor) -> OutputRenderer:
        return OutputRenderer(self.build_base(project), self.options)

    def run(self, project: ProjectDescriptor) -> RunResult:
        """Execute the full generation run.

        Args:
            project: Project to generate

        Returns:
            RunResult with every written output path

        Raises:
            CodegenError: First failure, or BatchError when fail_fast is off
        """
        logger.info(
            "Generating %d output(s) from %d include file(s)",
            len(project.outputs),
            len(project.includes),
        )

        result = self._renderer(project).render_all(project.outputs)

        if not result.success:
            raise BatchError(
                [failure.error for failure in result.failures],
                completed=result.completed,
            )

        return result

    def check(self, project: ProjectDescriptor) -> int:
        """Validate includes, inputs and templates without writing anything.

        Returns:
            Number of output tasks checked

        Raises:
            CodegenError: First failure found
        """
        renderer = self._renderer(project)
        for task in project.outputs:
            renderer.check_task(task)
        return len(project.outputs)

    def preview(self, project: ProjectDescriptor, index: int = 0) -> str:
        """Render a single output task to a string.

        Args:
            project: Project containing the task
            index: Zero-based task position

        Raises:
            ProjectError: If the index is out of range
            CodegenError: If the task fails
        """
        task = self._task_at(project, index)
        return self._renderer(project).render_to_string(task)

    @staticmethod
    def _task_at(project: ProjectDescriptor, index: int) -> OutputTask:
        if not 0 <= index < len(project.outputs):
            raise ProjectError(
                f"output index {index} out of range (project has {len(project.outputs)})",
                path=project.source,
            )
        return project.outputs[index]
