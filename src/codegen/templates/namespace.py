"""Named-definition namespace built on the Jinja2 AST.

A definition is a top-level ``{% macro name() %}...{% endmacro %}``. The
namespace keeps the parsed macro nodes by name together with the entry body of
the output template, and compiles them into a single Jinja2 template with every
definition placed ahead of the body. Definitions therefore behave like hoisted
named templates: any of them may invoke any other by name, whichever file
declared it and in whatever order.
"""

import copy
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, Undefined, nodes

from codegen.config import GeneratorOptions

logger = logging.getLogger(__name__)


class DuplicateDefinitionError(Exception):
    """Raised when a definition name is declared twice."""

    def __init__(self, name: str, first: Path | None, second: Path | None) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"definition '{name}' in '{second}' is already declared in '{first}'"
        )


def create_environment(
    options: GeneratorOptions,
    search_path: Path | None = None,
) -> Environment:
    """Create the Jinja2 environment shared by all namespaces of a run.

    Args:
        options: Generator options
        search_path: Directory for {% include %}/{% import %} lookups (defaults to cwd)

    Returns:
        Configured Jinja2 environment
    """
    return Environment(
        loader=FileSystemLoader(str(search_path or Path.cwd())),
        undefined=StrictUndefined if options.strict_undefined else Undefined,
        autoescape=options.autoescape,
        trim_blocks=options.trim_blocks,
        lstrip_blocks=options.lstrip_blocks,
        keep_trailing_newline=options.keep_trailing_newline,
    )


def _is_blank(node: nodes.Node) -> bool:
    """Return True for output nodes holding only whitespace text."""
    return isinstance(node, nodes.Output) and all(
        isinstance(child, nodes.TemplateData) and not child.data.strip()
        for child in node.nodes
    )


class Namespace:
    """Mutable set of named definitions plus an optional entry body.

    Usage:
        base = Namespace(env)
        base.add_definitions(env.parse(text), origin=path)
        base.freeze()

        task_ns = base.clone()
        task_ns.parse_entry(template_text, template_path)
        template = task_ns.compile(name=str(template_path))
    """

    def __init__(self, environment: Environment) -> None:
        """Initialize an empty namespace.

        Args:
            environment: Jinja2 environment used to parse and compile
        """
        self.environment = environment
        self._definitions: dict[str, nodes.Macro] = {}
        self._origins: dict[str, Path | None] = {}
        self._body: list[nodes.Node] = []
        self._frozen = False

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def names(self) -> list[str]:
        """Definition names in declaration order."""
        return list(self._definitions)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def origin(self, name: str) -> Path | None:
        """Return the file that declared a definition."""
        return self._origins.get(name)

    def freeze(self) -> "Namespace":
        """Make this namespace read-only. Clones are writable again."""
        self._frozen = True
        return self

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("namespace is frozen; clone it before adding definitions")

    def add_definitions(
        self,
        tree: nodes.Template,
        origin: Path | None = None,
        override: bool = False,
    ) -> list[nodes.Node]:
        """Add the top-level macros of a parsed template.

        Args:
            tree: Parsed template
            origin: File the template was read from
            override: Replace existing definitions instead of rejecting them

        Returns:
            The remaining top-level nodes that are not definitions

        Raises:
            DuplicateDefinitionError: If a name exists and override is False
        """
        self._check_writable()
        rest: list[nodes.Node] = []

        for node in tree.body:
            if not isinstance(node, nodes.Macro):
                rest.append(node)
                continue

            if node.name in self._definitions and not override:
                raise DuplicateDefinitionError(node.name, self._origins[node.name], origin)

            self._definitions[node.name] = node
            self._origins[node.name] = origin

        return rest

    def add_fragment(self, tree: nodes.Template, origin: Path | None = None) -> None:
        """Add a shared fragment's definitions, rejecting redefinition.

        Top-level text outside definitions is ignored.
        """
        rest = self.add_definitions(tree, origin=origin, override=False)
        if any(not _is_blank(node) for node in rest):
            logger.warning("Ignoring content outside definitions in %s", origin)

    def parse_entry(self, source: str, path: Path) -> None:
        """Parse an output template into this namespace.

        Its macros are added as additional or overriding definitions and the
        remaining top-level nodes become the entry body.

        Raises:
            jinja2.TemplateSyntaxError: On malformed template text
        """
        self._check_writable()
        tree = self.environment.parse(source, name=str(path), filename=str(path))
        self._body = self.add_definitions(tree, origin=path, override=True)

    def clone(self) -> "Namespace":
        """Return an independent, writable deep copy.

        The environment is shared; definition nodes and body are copied so
        that compiling or extending the clone never touches this namespace.
        """
        memo = {id(self.environment): self.environment}
        other = Namespace(self.environment)
        other._definitions = copy.deepcopy(self._definitions, memo)
        other._origins = dict(self._origins)
        other._body = copy.deepcopy(self._body, memo)
        return other

    def compile(self, name: str | None = None) -> Template:
        """Compile definitions and entry body into an executable template.

        Raises:
            jinja2.TemplateSyntaxError: If code generation rejects the tree
        """
        tree = nodes.Template([*self._definitions.values(), *self._body], lineno=1)
        tree.set_environment(self.environment)

        code = self.environment.compile(tree, name=name, filename=name)
        return self.environment.template_class.from_code(
            self.environment,
            code,
            self.environment.make_globals(None),
        )
