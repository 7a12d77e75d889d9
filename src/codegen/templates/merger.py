"""Include merger: parses shared fragments into the base namespace.

Runs once per generation run. The returned namespace is frozen; every output
task works on its own clone of it.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from jinja2 import Environment, TemplateSyntaxError

from codegen.config import GeneratorOptions
from codegen.errors import ParseError, Phase
from codegen.templates.namespace import DuplicateDefinitionError, Namespace, create_environment
from codegen.utils.files import read_text

logger = logging.getLogger(__name__)


def build_base(
    fragment_paths: Sequence[Path],
    options: GeneratorOptions | None = None,
    environment: Environment | None = None,
) -> Namespace:
    """Parse fragment files into one frozen namespace.

    Every file is read before any is parsed, and names are checked across all
    of them. An empty sequence yields an empty namespace.

    Args:
        fragment_paths: Fragment files in declaration order
        options: Generator options (defaults if None)
        environment: Jinja2 environment to share with the renderer

    Returns:
        Frozen base namespace

    Raises:
        FileAccessError: If a fragment cannot be read
        ParseError: On a syntax error or a duplicate definition name
    """
    options = options or GeneratorOptions()
    environment = environment or create_environment(options)

    sources = [
        (Path(path), read_text(Path(path), Phase.READ, "include file"))
        for path in fragment_paths
    ]

    base = Namespace(environment)
    for path, source in sources:
        try:
            tree = environment.parse(source, name=str(path), filename=str(path))
            base.add_fragment(tree, origin=path)
        except TemplateSyntaxError as e:
            raise ParseError(
                f"failed parsing include files: {path}:{e.lineno}: {e.message}",
                path=path,
                phase=Phase.PARSE_INCLUDE,
            ) from e
        except DuplicateDefinitionError as e:
            raise ParseError(
                f"failed parsing include files: {e}",
                path=path,
                phase=Phase.PARSE_INCLUDE,
            ) from e

    # Surface code generation errors once, against a throwaway copy.
    try:
        base.clone().compile(name="<includes>")
    except TemplateSyntaxError as e:
        raise ParseError(
            f"failed parsing include files: {e.message}",
            phase=Phase.PARSE_INCLUDE,
        ) from e

    logger.debug(
        "Parsed %d include file(s) into %d definition(s)", len(sources), len(base)
    )
    return base.freeze()
