"""
Ecto schema source parser.

Uses tree-sitter and tree-sitter-elixir to read an Ecto schema module
(`*.ex`) and report what Ecto's `__schema__/1` reflection would: the
source, the field list in declaration order with each field's type, and
the associations. Only the macro calls that affect the reflected schema
are interpreted; everything else in the module is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tree_sitter_elixir as ts_elixir
from tree_sitter import Language, Node, Parser

from ...utils import last_segment
from ..errors import SchemaSyntaxError, UnresolvedEnumError
from .nodes import Cardinality, NativeType

logger = logging.getLogger(__name__)

ELIXIR = Language(ts_elixir.language())


class Atom(str):
    """An Elixir atom (`:name`)."""

    def __repr__(self) -> str:
        return f":{str.__str__(self)}"


class Alias(str):
    """An Elixir module alias (`Accounts.User`, `__MODULE__`)."""


class KeywordPair(tuple):
    """A `key: value` entry of a keyword list, as `(Atom, value)`."""


@dataclass(frozen=True)
class Opaque:
    """A term the parser does not interpret (function calls, captures, maps)."""

    text: str


@dataclass
class Declaration:
    """A macro call such as `field :name, :string, default: ""`."""

    name: str
    args: list[Any] = field(default_factory=list)
    opts: dict[str, Any] = field(default_factory=dict)
    line: int = 0


@dataclass
class EctoSchemaSource:
    """Reflection data parsed from an Ecto schema file.

    Implements the `SchemaSource` and `AssociationSource` protocols.
    """

    identity: str = ""
    source: str | None = None
    fields: list[tuple[str, NativeType]] = field(default_factory=list)
    associations: list[tuple[str, str, Cardinality]] = field(default_factory=list)
    path: Path | None = None

    def schema_identity(self) -> str:
        return self.identity

    def schema_fields(self) -> list[str]:
        return [name for name, _ in self.fields]

    def schema_type(self, field_name: str) -> NativeType:
        for name, native in self.fields:
            if name == field_name:
                return native
        raise KeyError(field_name)

    def schema_source(self) -> str | None:
        return self.source

    def schema_associations(self) -> list[tuple[str, str, Cardinality]]:
        return list(self.associations)


@dataclass
class ModuleScope:
    """Module being walked: its full name, aliases and attributes."""

    module: str = ""
    aliases: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)

    def child(self, module: str) -> ModuleScope:
        return ModuleScope(module=module, aliases=dict(self.aliases))

    def resolve(self, value: Any) -> str:
        """Expand `__MODULE__` and aliases in a module name."""
        name = str(value.text if isinstance(value, Opaque) else value)
        head, _, tail = name.partition(".")
        if head == "__MODULE__":
            head = self.module
        elif head in self.aliases:
            head = self.aliases[head]
        return f"{head}.{tail}" if tail else head


# --- Tree helpers ---


def node_text(node: Node, code: bytes) -> str:
    """Get the source text for a node."""
    return code[node.start_byte : node.end_byte].decode("utf-8")


def named_children(node: Node) -> list[Node]:
    """Named children of a node, comments excluded."""
    return [child for child in node.named_children if child.type != "comment"]


def child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def find_errors(node: Node) -> list[Node]:
    """Find all ERROR and missing nodes in the tree."""
    errors = []
    if node.type == "ERROR" or node.is_missing:
        errors.append(node)
    for child in node.children:
        errors.extend(find_errors(child))
    return errors


def call_name(node: Node, code: bytes) -> str | None:
    """Name of a local call (`field ...`, `timestamps()`, bare `timestamps`)."""
    if node.type == "identifier":
        return node_text(node, code)
    if node.type != "call":
        return None
    target = node.child_by_field_name("target")
    if target is None or target.type != "identifier":
        return None
    return node_text(target, code)


def _quoted_content(node: Node, code: bytes) -> str:
    return "".join(node_text(child, code) for child in node.children if child.type in ("quoted_content", "escape_sequence"))


def _keyword_key(node: Node, code: bytes) -> str:
    if node.type == "quoted_keyword":
        return _quoted_content(node, code)
    return node_text(node, code).strip().removesuffix(":")


def keyword_pairs(node: Node, code: bytes, attributes: dict[str, Any] | None = None) -> list[KeywordPair]:
    """Convert a `keywords` node to `(Atom, value)` pairs."""
    pairs = []
    for pair in named_children(node):
        key = pair.child_by_field_name("key")
        value = pair.child_by_field_name("value")
        if key is None or value is None:
            continue
        pairs.append(KeywordPair((Atom(_keyword_key(key, code)), to_term(value, code, attributes))))
    return pairs


def _sigil_term(node: Node, code: bytes) -> Any:
    name_node = child_of_type(node, "sigil_name")
    modifiers_node = child_of_type(node, "sigil_modifiers")
    name = node_text(name_node, code) if name_node else ""
    modifiers = node_text(modifiers_node, code) if modifiers_node else ""
    content = _quoted_content(node, code)

    if name in ("w", "W"):
        words = content.split()
        return [Atom(word) for word in words] if "a" in modifiers else words
    if name in ("s", "S"):
        return content
    return Opaque(node_text(node, code))


def _number(kind: str, text: str) -> int | float:
    cleaned = text.replace("_", "")
    if kind == "float":
        return float(cleaned)
    try:
        # 0x, 0o and 0b prefixes
        return int(cleaned, 0)
    except ValueError:
        return int(cleaned)


def to_term(node: Node, code: bytes, attributes: dict[str, Any] | None = None) -> Any:
    """
    Convert a literal expression node to a Python value.

    Atoms become `Atom`, module names `Alias`, lists `list` (keyword
    pairs as `KeywordPair`), tuples `tuple`, `~w` sigils lists of words
    (atoms with the `a` modifier). `@name` references are looked up in
    `attributes`. Anything else is returned as `Opaque`.
    """
    kind = node.type
    text = node_text(node, code)

    if kind == "atom":
        return Atom(text[1:])
    if kind == "quoted_atom":
        return Atom(_quoted_content(node, code))
    if kind == "string":
        return _quoted_content(node, code)
    if kind == "boolean":
        return text == "true"
    if kind == "nil":
        return None
    if kind in ("integer", "float"):
        return _number(kind, text)
    if kind == "alias":
        return Alias("".join(text.split()))
    if kind == "identifier" and text == "__MODULE__":
        return Alias(text)
    if kind == "sigil":
        return _sigil_term(node, code)

    if kind == "dot":
        # __MODULE__.Post
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is not None and right is not None and right.type == "alias":
            head = to_term(left, code, attributes)
            if isinstance(head, Alias):
                return Alias(f"{head}.{node_text(right, code)}")
        return Opaque(text)

    if kind == "list":
        items: list[Any] = []
        for child in named_children(node):
            if child.type == "keywords":
                items.extend(keyword_pairs(child, code, attributes))
            else:
                items.append(to_term(child, code, attributes))
        return items

    if kind == "tuple":
        positional = []
        keywords: list[KeywordPair] = []
        for child in named_children(node):
            if child.type == "keywords":
                keywords.extend(keyword_pairs(child, code, attributes))
            else:
                positional.append(to_term(child, code, attributes))
        # Trailing keywords in a tuple form a single keyword list: {:id, :id, autogenerate: true}
        return tuple(positional + [keywords]) if keywords else tuple(positional)

    if kind == "keywords":
        return keyword_pairs(node, code, attributes)

    if kind == "unary_operator":
        operator = node.child_by_field_name("operator")
        operand = node.child_by_field_name("operand")
        if operator is not None and operand is not None and node_text(operator, code) == "@" and operand.type == "identifier":
            name = node_text(operand, code)
            if attributes is not None and name in attributes:
                return attributes[name]

    return Opaque(text)


def parse_declaration(node: Node, code: bytes, attributes: dict[str, Any] | None = None) -> Declaration | None:
    """Parse a macro call node into name, positional args and options."""
    name = call_name(node, code)
    if name is None:
        return None

    decl = Declaration(name=name, line=node.start_point[0] + 1)
    arguments = child_of_type(node, "arguments")
    if arguments is None:
        return decl

    for child in named_children(arguments):
        if child.type == "keywords":
            for key, value in keyword_pairs(child, code, attributes):
                decl.opts[str(key)] = value
        else:
            decl.args.append(to_term(child, code, attributes))
    return decl


def keyword_to_dict(value: Any) -> dict[str, Any]:
    """Convert a parsed keyword list to a dict."""
    if not isinstance(value, list):
        return {}
    return {str(k): v for k, v in (item for item in value if isinstance(item, tuple) and len(item) == 2)}


class EctoSchemaParser:
    """Parses Ecto schema module source into an `EctoSchemaSource`."""

    # Declarations that map to Ecto reflection data
    ASSOCIATIONS = {
        "has_one": Cardinality.ONE,
        "belongs_to": Cardinality.ONE,
        "has_many": Cardinality.MANY,
        "many_to_many": Cardinality.MANY,
    }
    EMBEDS = {"embeds_one", "embeds_many"}

    DEFAULT_PRIMARY_KEY = ("id", NativeType("id"))
    DEFAULT_TIMESTAMP_TYPE = "naive_datetime"

    def __init__(self):
        self._parser = Parser(ELIXIR)

    def parse_file(self, path: Path) -> EctoSchemaSource | None:
        """Parse a schema file; returns None when it declares no schema."""
        source = self.parse(path.read_text(encoding="utf-8"), origin=str(path))
        if source is not None:
            source.path = path
        return source

    def parse(self, code: str, origin: str = "<string>") -> EctoSchemaSource | None:
        """
        Parse Ecto source code.

        Args:
            code: Elixir source text
            origin: Name used in error messages

        Returns:
            The parsed schema, or None if no `schema "..." do` block is
            found (embedded schemas have no source and are not schemas here)

        Raises:
            SchemaSyntaxError: If the code is not valid Elixir
            UnresolvedEnumError: If an Ecto.Enum field has no literal values
        """
        source = code.encode("utf-8")
        tree = self._parser.parse(source)

        if tree.root_node.has_error:
            errors = find_errors(tree.root_node)
            if errors:
                first_error = errors[0]
                raise SchemaSyntaxError(origin, first_error.start_point[0] + 1, node_text(first_error, source)[:50])
            raise SchemaSyntaxError(origin, 1)

        return self._visit_body(named_children(tree.root_node), source, ModuleScope())

    def parse_term(self, text: str, attributes: dict[str, Any] | None = None) -> Any:
        """Parse a single literal Elixir expression."""
        source = text.encode("utf-8")
        expressions = named_children(self._parser.parse(source).root_node)
        if not expressions:
            return None
        return to_term(expressions[0], source, attributes)

    # --- Module walk ---

    def _visit_module(self, node: Node, code: bytes, parent: ModuleScope) -> EctoSchemaSource | None:
        decl = parse_declaration(node, code)
        body = child_of_type(node, "do_block")
        if decl is None or not decl.args or body is None:
            return None

        name = str(decl.args[0])
        if name.startswith("__MODULE__") or not parent.module:
            module = parent.resolve(name)
        else:
            # Nested modules are prefixed by their parent and aliased in it
            module = f"{parent.module}.{name}"
            first = name.partition(".")[0]
            parent.aliases[first] = f"{parent.module}.{first}"

        return self._visit_body(named_children(body), code, parent.child(module))

    def _visit_body(self, nodes: list[Node], code: bytes, scope: ModuleScope) -> EctoSchemaSource | None:
        schema_node = None
        schema_attributes: dict[str, Any] = {}
        nested = None

        for node in nodes:
            if node.type == "unary_operator":
                self._collect_attribute(node, code, scope)
                continue

            name = call_name(node, code)
            if name == "defmodule":
                found = self._visit_module(node, code, scope)
                nested = nested or found
            elif name == "alias":
                # Aliases may also follow the schema block
                scope.aliases.update(self._parse_alias(node, code, scope))
            elif name == "embedded_schema":
                logger.debug("Skipping embedded_schema in %s", scope.module)
            elif name == "schema" and schema_node is None and child_of_type(node, "do_block") is not None:
                schema_node = node
                schema_attributes = dict(scope.attributes)

        if schema_node is None:
            return nested
        return self._build(schema_node, code, scope, schema_attributes)

    def _collect_attribute(self, node: Node, code: bytes, scope: ModuleScope) -> None:
        operator = node.child_by_field_name("operator")
        operand = node.child_by_field_name("operand")
        if operator is None or operand is None or operand.type != "call" or node_text(operator, code) != "@":
            return
        decl = parse_declaration(operand, code, scope.attributes)
        if decl is None or len(decl.args) != 1:
            return
        scope.attributes[decl.name] = decl.args[0]

    def _parse_alias(self, node: Node, code: bytes, scope: ModuleScope) -> dict[str, str]:
        """Parse an `alias` call into short -> full names."""
        arguments = child_of_type(node, "arguments")
        if arguments is None:
            return {}
        children = named_children(arguments)
        if not children:
            return {}

        # alias Foo.{Bar, Baz}
        target = children[0]
        if target.type == "dot":
            left = target.child_by_field_name("left")
            right = target.child_by_field_name("right")
            if left is not None and right is not None and right.type == "tuple":
                base = scope.resolve(to_term(left, code))
                return {
                    last_segment(node_text(child, code)): f"{base}.{node_text(child, code)}"
                    for child in named_children(right)
                    if child.type == "alias"
                }

        decl = parse_declaration(node, code)
        module = decl.args[0] if decl.args else None
        if not isinstance(module, Alias):
            return {}
        full = scope.resolve(module)
        short = str(decl.opts.get("as", last_segment(full)))
        return {short: full}

    # --- Schema block ---

    def _build(self, node: Node, code: bytes, scope: ModuleScope, attributes: dict[str, Any]) -> EctoSchemaSource:
        decl = parse_declaration(node, code, attributes)
        source_name = None
        if decl.args and isinstance(decl.args[0], str) and not isinstance(decl.args[0], (Atom, Alias)):
            source_name = decl.args[0]

        result = EctoSchemaSource(identity=scope.module, source=source_name)
        self._add_primary_key(result, attributes, scope)

        for child in named_children(child_of_type(node, "do_block")):
            entry = parse_declaration(child, code, attributes)
            if entry is None:
                logger.debug("Ignoring %s on line %d", child.type, child.start_point[0] + 1)
                continue
            self._apply(result, entry, attributes, scope)

        return result

    def _add_primary_key(self, result: EctoSchemaSource, attributes: dict[str, Any], scope: ModuleScope) -> None:
        primary_key = attributes.get("primary_key")
        if primary_key is False:
            return
        if isinstance(primary_key, tuple) and len(primary_key) >= 2:
            result.fields.append((str(primary_key[0]), self._native_type(primary_key[1], {}, scope)))
            return
        result.fields.append(self.DEFAULT_PRIMARY_KEY)

    def _native_type(self, value: Any, opts: dict[str, Any], scope: ModuleScope) -> NativeType:
        """Convert a parsed type term to a native type."""
        if isinstance(value, Atom):
            return NativeType(str(value))
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], Atom):
            return NativeType(str(value[0]), inner=self._native_type(value[1], {}, scope))
        if isinstance(value, Alias):
            module = scope.resolve(value)
            if module == "Ecto.Enum":
                return NativeType.enum(self._enum_values(opts.get("values")))
            return NativeType(module)
        if isinstance(value, Opaque):
            return NativeType(value.text)
        return NativeType(str(value))

    def _enum_values(self, values: Any) -> list[str]:
        if not isinstance(values, list):
            return []
        result = []
        for value in values:
            # Keyword form maps atoms to integers or strings: [active: 1]
            if isinstance(value, tuple) and len(value) == 2:
                value = value[0]
            if isinstance(value, Opaque):
                return []
            result.append(str(value))
        return result

    def _apply(self, result: EctoSchemaSource, decl: Declaration, attributes: dict[str, Any], scope: ModuleScope) -> None:
        if decl.name == "field":
            self._apply_field(result, decl, scope)
        elif decl.name == "timestamps":
            self._apply_timestamps(result, decl, attributes)
        elif decl.name in self.ASSOCIATIONS:
            self._apply_association(result, decl, attributes, scope)
        elif decl.name in self.EMBEDS:
            if decl.args:
                related = scope.resolve(decl.args[1]) if len(decl.args) > 1 else ""
                result.fields.append((str(decl.args[0]), NativeType("embed", inner=NativeType(related))))
        else:
            logger.debug("Ignoring %s on line %d", decl.name, decl.line)

    def _apply_field(self, result: EctoSchemaSource, decl: Declaration, scope: ModuleScope) -> None:
        if not decl.args:
            logger.warning("field without a name on line %d", decl.line)
            return
        if decl.opts.get("virtual") is True:
            return
        name = str(decl.args[0])
        type_term = decl.args[1] if len(decl.args) > 1 else Atom("string")
        native = self._native_type(type_term, decl.opts, scope)
        if native.is_enum and not native.values:
            raise UnresolvedEnumError(result.identity, name)
        result.fields.append((name, native))

    def _apply_timestamps(self, result: EctoSchemaSource, decl: Declaration, attributes: dict[str, Any]) -> None:
        opts = keyword_to_dict(attributes.get("timestamps_opts"))
        opts.update(decl.opts)
        if decl.args:
            opts.update(keyword_to_dict(decl.args[0]))

        native = NativeType(str(opts.get("type", self.DEFAULT_TIMESTAMP_TYPE)))
        for key in ("inserted_at", "updated_at"):
            name = opts.get(key, key)
            if name is False:
                continue
            result.fields.append((str(name), native))

    def _apply_association(self, result: EctoSchemaSource, decl: Declaration, attributes: dict[str, Any], scope: ModuleScope) -> None:
        if not decl.args:
            logger.warning("%s without a name on line %d", decl.name, decl.line)
            return
        name = str(decl.args[0])

        if "through" in decl.opts or len(decl.args) < 2:
            logger.warning("Skipping %s :%s (no related schema to derive a type from)", decl.name, name)
            return

        related = scope.resolve(decl.args[1])

        if decl.name == "belongs_to" and decl.opts.get("define_field") is not False:
            foreign_key = str(decl.opts.get("foreign_key", f"{name}_id"))
            key_type = decl.opts.get("type", attributes.get("foreign_key_type", Atom("id")))
            result.fields.append((foreign_key, self._native_type(key_type, {}, scope)))

        result.associations.append((name, related, self.ASSOCIATIONS[decl.name]))
