"""codegen - Batch document generator.

Merges shared Jinja2 fragments with per-output templates and per-output JSON
data, writing one rendered file per output task. Shared fragments are parsed
once; every output renders against its own copy of them, so definitions local
to one output never leak into another.
"""

__version__ = "0.1.0"
