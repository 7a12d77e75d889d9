"""Codegen data models.

This module exports the entities used throughout the application:
- ProjectDescriptor: Include fragments plus ordered output tasks
- OutputTask: Template/input/output triple
- InputData: JSON value tree bound to a template at render time
"""

from codegen.models.data import InputData, JSONValue, lookup
from codegen.models.project import OutputTask, ProjectDescriptor

__all__ = [
    "ProjectDescriptor",
    "OutputTask",
    "InputData",
    "JSONValue",
    "lookup",
]
