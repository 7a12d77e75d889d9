"""Output renderer: binds each output task's template to its input data.

Each task is processed end-to-end before the next begins:
1. Load and decode the input JSON
2. Clone the base namespace and parse the task's template into it
3. Open the destination
4. Stream the render into the destination
5. Release the destination handle

The base namespace is only ever read through clones, so a definition
introduced by one task's template is invisible to every other task.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Template, TemplateSyntaxError

from codegen.config import GeneratorOptions
from codegen.errors import CodegenError, FileAccessError, ParseError, Phase, RenderError
from codegen.models import InputData, OutputTask
from codegen.templates.namespace import Namespace
from codegen.utils.files import open_destination, read_bytes, read_text

logger = logging.getLogger(__name__)


@dataclass
class TaskFailure:
    """A task that failed in keep-going mode."""

    task: OutputTask
    error: CodegenError


@dataclass
class RunResult:
    """Outcome of rendering a list of output tasks.

    Attributes:
        completed: Output paths written successfully, in task order
        failures: Failed tasks (only populated when fail_fast is off)
    """

    completed: list[Path] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


class OutputRenderer:
    """Renders output tasks against a shared base namespace.

    Usage:
        base = build_base(project.includes, options)
        renderer = OutputRenderer(base, options)
        result = renderer.render_all(project.outputs)
    """

    def __init__(self, base: Namespace, options: GeneratorOptions | None = None) -> None:
        """Initialize the renderer.

        Template engine options (undefined handling, escaping, whitespace)
        are fixed by the environment the base namespace was built with; the
        renderer reads the output-related options.

        Args:
            base: Frozen namespace built by the include merger
            options: Generator options (defaults if None)
        """
        self.base = base
        self.options = options or GeneratorOptions()

    def load_input(self, task: OutputTask) -> InputData:
        """Read and decode a task's input file.

        Raises:
            FileAccessError: If the input file cannot be read
            ParseError: If it is not well-formed UTF-8 JSON
        """
        content = read_bytes(task.input, Phase.READ, "input file")
        return InputData.decode(task.input, content)

    def prepare(self, task: OutputTask) -> Template:
        """Build the executable template for a task from a fresh clone.

        Raises:
            FileAccessError: If the template file cannot be read
            ParseError: If cloning, parsing or compiling fails
        """
        try:
            namespace = self.base.clone()
        except Exception as e:
            raise ParseError(
                f"failed to create template '{task.template}': {e}",
                path=task.template,
                phase=Phase.CLONE,
            ) from e

        source = read_text(task.template, Phase.READ, "output template")

        try:
            namespace.parse_entry(source, task.template)
            return namespace.compile(name=str(task.template))
        except TemplateSyntaxError as e:
            raise ParseError(
                f"failed to parse template '{task.template}': line {e.lineno}: {e.message}",
                path=task.template,
                phase=Phase.PARSE_TEMPLATE,
            ) from e

    def render_task(self, task: OutputTask) -> Path:
        """Render one task into its destination file.

        The input is decoded and the template parsed before the destination
        is opened, so failures in those steps leave the destination untouched.

        Returns:
            The written output path

        Raises:
            FileAccessError, ParseError, RenderError
        """
        data = self.load_input(task)
        template = self.prepare(task)

        with open_destination(
            task.output,
            atomic=self.options.atomic_writes,
            make_dirs=self.options.make_dirs,
        ) as handle:
            try:
                template.stream(data.as_context(self.options.root_variable)).dump(handle)
            except OSError as e:
                raise FileAccessError(
                    f"failed to write output file '{task.output}': {e}",
                    path=task.output,
                    phase=Phase.CREATE_OUTPUT,
                ) from e
            except Exception as e:
                raise RenderError(
                    f"failed to execute template '{task.output}': {e}",
                    path=task.output,
                    phase=Phase.RENDER,
                ) from e

        logger.info("Rendered %s -> %s", task.template, task.output)
        return task.output

    def render_to_string(self, task: OutputTask) -> str:
        """Render one task in memory without touching its destination.

        Raises:
            FileAccessError, ParseError, RenderError
        """
        data = self.load_input(task)
        template = self.prepare(task)

        try:
            return template.render(data.as_context(self.options.root_variable))
        except Exception as e:
            raise RenderError(
                f"failed to execute template '{task.output}': {e}",
                path=task.output,
                phase=Phase.RENDER,
            ) from e

    def check_task(self, task: OutputTask) -> None:
        """Validate a task's input and template without rendering.

        Raises:
            FileAccessError, ParseError
        """
        self.load_input(task)
        self.prepare(task)
        logger.debug("Checked %s", task.template)

    def render_all(self, tasks: Sequence[OutputTask]) -> RunResult:
        """Render tasks sequentially.

        With fail_fast (the default) the first failure is raised and remaining
        tasks are not attempted; outputs already written stay on disk.
        Otherwise every task is attempted and failures are collected in the
        result.

        Returns:
            RunResult with the written output paths and collected failures

        Raises:
            CodegenError: First failure when fail_fast is on
        """
        result = RunResult()

        for index, task in enumerate(tasks, start=1):
            logger.debug("Task %d/%d: %s", index, len(tasks), task.output)
            try:
                result.completed.append(self.render_task(task))
            except CodegenError as e:
                if self.options.fail_fast:
                    raise
                logger.error("%s", e)
                result.failures.append(TaskFailure(task=task, error=e))

        return result


def render_all(
    base: Namespace,
    tasks: Sequence[OutputTask],
    options: GeneratorOptions | None = None,
) -> RunResult:
    """Render every task against clones of the base namespace.

    Convenience wrapper around OutputRenderer.render_all.
    """
    return OutputRenderer(base, options).render_all(tasks)
