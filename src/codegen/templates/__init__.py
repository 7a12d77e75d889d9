"""Codegen template composition (Include Merger and Output Renderer).

Shared fragments are parsed once into a frozen Jinja2 namespace; every output
task renders against its own clone of it.
"""

from codegen.templates.merger import build_base
from codegen.templates.namespace import DuplicateDefinitionError, Namespace, create_environment
from codegen.templates.renderer import OutputRenderer, RunResult, TaskFailure, render_all

__all__ = [
    "build_base",
    "create_environment",
    "DuplicateDefinitionError",
    "Namespace",
    "OutputRenderer",
    "RunResult",
    "TaskFailure",
    "render_all",
]
