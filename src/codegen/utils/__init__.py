"""Codegen utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- files: Path reads and scoped destination handles
"""

from codegen.utils.files import open_destination, read_bytes, read_text
from codegen.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "open_destination",
    "read_bytes",
    "read_text",
]
