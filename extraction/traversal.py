"""
Syntax tree traversal and declaration lowering.

This module walks a tree-sitter Rust syntax tree in source order and lowers
functions, structs, enums and type aliases into the parser-neutral records of
``extraction.syntax``, together with the outer attributes that decorate them.
"""

import logging
import re
from typing import Iterator, List, Optional, Tuple
from tree_sitter import Node, Tree

from extraction.config import (
    ATTRIBUTE_ITEM,
    ATTRIBUTE_NODE,
    C_ABI,
    COMMENT_NODES,
    DECLARATION_ITEM_TYPES,
    ENUM_ITEM,
    ENUM_VARIANT_NODE,
    EXTERN_MODIFIER_NODE,
    FIELD_DECLARATION_NODE,
    FUNCTION_ITEM,
    FUNCTION_MODIFIERS_NODE,
    KIND_ARRAY,
    KIND_GENERIC,
    KIND_GENERIC_ARGUMENT,
    KIND_INFERRED,
    KIND_PATH,
    KIND_POINTER,
    KIND_SLICE,
    KIND_TOO_DEEP,
    KIND_UNKNOWN,
    KIND_VARIADIC,
    MAX_TYPE_DEPTH,
    METHOD_CONTAINERS,
    NAMED_FIELDS_NODE,
    NON_TYPE_GENERIC_ARGUMENTS,
    OPAQUE_SUBTREES,
    ORDERED_FIELDS_NODE,
    PARAMETER_NODE,
    PATH_TYPE_NODES,
    SELF_PARAMETER_NODE,
    STRUCT_ITEM,
    TYPE_ALIAS_ITEM,
    TYPE_NODE_KINDS,
    UNSAFE_ATTRIBUTE_WRAPPER,
    VARIADIC_PARAMETER_NODE,
    VISIBILITY_NODE,
)
from extraction.syntax import (
    Attribute,
    Declaration,
    EnumDecl,
    FieldDecl,
    FunctionDecl,
    Param,
    StructDecl,
    TypeAliasDecl,
    TypeExpr,
    VariantDecl,
)

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s+")
_META_RE = re.compile(r"^(?P<name>[\w:]+)\s*(?:(?P<args>\(.*\))|=\s*(?P<value>.*))?$", re.DOTALL)
_OPEN_DELIMITERS = "([{"
_CLOSE_DELIMITERS = ")]}"


def node_text(node: Optional[Node]) -> str:
    """Return the UTF-8 source text of a node, or '' for None."""
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8")


def split_attribute_arguments(token_tree: str) -> Tuple[str, ...]:
    """Split ``(C, align(8))`` into top-level tokens ``("C", "align(8)")``.

    Commas nested inside delimiters or string literals do not split.

    Args:
        token_tree: The delimited argument text of an attribute.

    Returns:
        Whitespace-normalized tokens, empty ones dropped.
    """
    text = token_tree.strip()
    if len(text) >= 2 and text[0] in _OPEN_DELIMITERS and text[-1] in _CLOSE_DELIMITERS:
        text = text[1:-1]

    tokens: List[str] = []
    depth = 0
    in_string = False
    escaped = False
    current: List[str] = []
    for char in text:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPEN_DELIMITERS:
            depth += 1
        elif char in _CLOSE_DELIMITERS:
            depth -= 1
        elif char == "," and depth == 0:
            tokens.append("".join(current))
            current = []
            continue
        current.append(char)
    tokens.append("".join(current))

    normalized = (_SPACE_RE.sub(" ", token).strip() for token in tokens)
    return tuple(token for token in normalized if token)


def _unwrap_unsafe_attribute(attribute: Attribute) -> Attribute:
    """Turn ``#[unsafe(no_mangle)]`` into ``#[no_mangle]``."""
    if attribute.name != UNSAFE_ATTRIBUTE_WRAPPER or len(attribute.args) != 1:
        return attribute
    match = _META_RE.match(attribute.args[0])
    if not match:
        return attribute
    args = match.group("args")
    return Attribute(
        name=match.group("name"),
        args=split_attribute_arguments(args) if args else (),
        value=match.group("value"),
        text=attribute.text,
    )


def lower_attribute(attribute_item: Node) -> Optional[Attribute]:
    """Lower an ``attribute_item`` node into an Attribute."""
    attribute_node = None
    for child in attribute_item.named_children:
        if child.type == ATTRIBUTE_NODE:
            attribute_node = child
            break
    if attribute_node is None or not attribute_node.named_children:
        logger.debug(f"Attribute at line {attribute_item.start_point.row + 1} has no path")
        return None

    path = attribute_node.named_children[0]
    arguments = attribute_node.child_by_field_name("arguments")
    value = attribute_node.child_by_field_name("value")
    attribute = Attribute(
        name=_SPACE_RE.sub("", node_text(path)),
        args=split_attribute_arguments(node_text(arguments)) if arguments else (),
        value=node_text(value) if value else None,
        text=node_text(attribute_item),
    )
    return _unwrap_unsafe_attribute(attribute)


def get_outer_attributes(node: Node) -> Tuple[Attribute, ...]:
    """Collect the outer attributes decorating an item.

    tree-sitter places ``#[...]`` as siblings before the item, so this walks
    backward over attribute and comment siblings.

    Args:
        node: The item node.

    Returns:
        Attributes in source order.
    """
    attributes = []
    sibling = node.prev_named_sibling
    while sibling is not None and (sibling.type == ATTRIBUTE_ITEM or sibling.type in COMMENT_NODES):
        if sibling.type == ATTRIBUTE_ITEM:
            attribute = lower_attribute(sibling)
            if attribute is not None:
                attributes.append(attribute)
        sibling = sibling.prev_named_sibling

    attributes.reverse()
    return tuple(attributes)


def get_visibility(node: Node) -> Optional[str]:
    for child in node.named_children:
        if child.type == VISIBILITY_NODE:
            return _SPACE_RE.sub("", node_text(child))
    return None


def get_abi(node: Node) -> Optional[str]:
    """Return the ``extern`` ABI of a function item.

    A bare ``extern fn`` uses the C ABI. Returns None when not extern.
    """
    for child in node.named_children:
        if child.type != FUNCTION_MODIFIERS_NODE:
            continue
        for modifier in child.named_children:
            if modifier.type != EXTERN_MODIFIER_NODE:
                continue
            for literal in modifier.named_children:
                if literal.type in ("string_literal", "raw_string_literal"):
                    return node_text(literal).lstrip("r#").strip('"#')
            return C_ABI
    return None


def lower_type(node: Optional[Node], depth: int = 0) -> TypeExpr:
    """Lower a tree-sitter type node into a TypeExpr.

    Never raises; shapes the translator rejects get their own kind, and
    anything unrecognised becomes ``unknown``. Nesting deeper than
    MAX_TYPE_DEPTH is cut off as a single ``too_deep`` expression.
    """
    if node is None:
        return TypeExpr(kind=KIND_UNKNOWN, text="")

    node_type = node.type
    text = node_text(node)

    if depth > MAX_TYPE_DEPTH:
        return TypeExpr(kind=KIND_TOO_DEEP, text=text)

    if node_type in PATH_TYPE_NODES:
        # A generic segment inside a scoped path (foo::Bar<T>::Baz)
        if "<" in text:
            return TypeExpr(kind=KIND_GENERIC, text=text, base=text)
        return TypeExpr(kind=KIND_PATH, text=text)

    if node_type == "generic_type":
        base = node.child_by_field_name("type")
        type_arguments = node.child_by_field_name("type_arguments")
        args = ()
        if type_arguments is not None:
            args = tuple(
                _lower_type_argument(child, depth + 1)
                for child in type_arguments.named_children
                if child.type not in COMMENT_NODES
            )
        return TypeExpr(kind=KIND_GENERIC, text=text, args=args, base=node_text(base))

    if node_type == "array_type":
        element = lower_type(node.child_by_field_name("element"), depth + 1)
        length = node.child_by_field_name("length")
        if length is None:
            return TypeExpr(kind=KIND_SLICE, text=text, args=(element,))
        return TypeExpr(kind=KIND_ARRAY, text=text, args=(element,), length=node_text(length))

    if node_type == "pointer_type":
        return TypeExpr(
            kind=KIND_POINTER,
            text=text,
            args=(lower_type(node.child_by_field_name("type"), depth + 1),),
        )

    if node_type in TYPE_NODE_KINDS:
        return TypeExpr(kind=TYPE_NODE_KINDS[node_type], text=text)

    if text.strip() == "_":
        return TypeExpr(kind=KIND_INFERRED, text=text)

    logger.debug(f"Unrecognized type node '{node_type}' at line {node.start_point.row + 1}")
    return TypeExpr(kind=KIND_UNKNOWN, text=text)


def _lower_type_argument(node: Node, depth: int) -> TypeExpr:
    if node.type in NON_TYPE_GENERIC_ARGUMENTS:
        return TypeExpr(kind=KIND_GENERIC_ARGUMENT, text=node_text(node))
    return lower_type(node, depth)


def _item_name(node: Node) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    if name_node is None or not name_node.text:
        return None
    return node_text(name_node)


def _line(node: Node) -> int:
    return node.start_point.row + 1


def lower_function(node: Node) -> Optional[FunctionDecl]:
    name = _item_name(node)
    if not name:
        return None

    params = []
    parameters = node.child_by_field_name("parameters")
    if parameters is not None:
        for child in parameters.named_children:
            if child.type in (ATTRIBUTE_ITEM, SELF_PARAMETER_NODE) or child.type in COMMENT_NODES:
                continue
            if child.type == PARAMETER_NODE:
                pattern = child.child_by_field_name("pattern")
                params.append(
                    Param(
                        name=_SPACE_RE.sub(" ", node_text(pattern)).strip(),
                        type=lower_type(child.child_by_field_name("type")),
                    )
                )
            elif child.type == VARIADIC_PARAMETER_NODE:
                params.append(Param(name="...", type=TypeExpr(kind=KIND_VARIADIC, text=node_text(child))))
            else:
                params.append(Param(name="_", type=lower_type(child)))

    return_type = node.child_by_field_name("return_type")
    return FunctionDecl(
        name=name,
        visibility=get_visibility(node),
        attributes=get_outer_attributes(node),
        abi=get_abi(node),
        params=tuple(params),
        ret=lower_type(return_type) if return_type is not None else None,
        line=_line(node),
    )


def lower_struct(node: Node) -> Optional[StructDecl]:
    name = _item_name(node)
    if not name:
        return None

    body = node.child_by_field_name("body")
    fields = None
    tuple_like = False
    if body is not None and body.type == NAMED_FIELDS_NODE:
        fields = tuple(
            FieldDecl(
                name=node_text(child.child_by_field_name("name")),
                type=lower_type(child.child_by_field_name("type")),
            )
            for child in body.named_children
            if child.type == FIELD_DECLARATION_NODE
        )
    elif body is not None and body.type == ORDERED_FIELDS_NODE:
        tuple_like = True
        fields = tuple(
            FieldDecl(name=None, type=lower_type(child))
            for child in body.children_by_field_name("type")
        )

    return StructDecl(
        name=name,
        visibility=get_visibility(node),
        attributes=get_outer_attributes(node),
        fields=fields,
        tuple_like=tuple_like,
        line=_line(node),
    )


def _variant_has_fields(variant: Node) -> bool:
    body = variant.child_by_field_name("body")
    if body is None:
        return False
    return any(
        child.type != ATTRIBUTE_ITEM and child.type not in COMMENT_NODES
        for child in body.named_children
    )


def lower_enum(node: Node) -> Optional[EnumDecl]:
    name = _item_name(node)
    if not name:
        return None

    variants = []
    body = node.child_by_field_name("body")
    if body is not None:
        for child in body.named_children:
            if child.type != ENUM_VARIANT_NODE:
                continue
            value = child.child_by_field_name("value")
            variants.append(
                VariantDecl(
                    name=node_text(child.child_by_field_name("name")),
                    discriminant=node_text(value) if value is not None else None,
                    has_fields=_variant_has_fields(child),
                )
            )

    return EnumDecl(
        name=name,
        visibility=get_visibility(node),
        attributes=get_outer_attributes(node),
        variants=tuple(variants),
        line=_line(node),
    )


def lower_type_alias(node: Node) -> Optional[TypeAliasDecl]:
    name = _item_name(node)
    if not name:
        return None
    target = node.child_by_field_name("type")
    return TypeAliasDecl(
        name=name,
        visibility=get_visibility(node),
        attributes=get_outer_attributes(node),
        target=lower_type(target) if target is not None else None,
        line=_line(node),
    )


_LOWERERS = {
    FUNCTION_ITEM: lower_function,
    STRUCT_ITEM: lower_struct,
    ENUM_ITEM: lower_enum,
    TYPE_ALIAS_ITEM: lower_type_alias,
}


def is_method(node: Node) -> bool:
    """Check if a function item sits directly in an impl or trait body."""
    body = node.parent
    if body is None or body.parent is None:
        return False
    return body.parent.type in METHOD_CONTAINERS


def lower_declaration(node: Node) -> Optional[Declaration]:
    """Lower a single item node, or return None if it is not a declaration we track."""
    if node.type not in DECLARATION_ITEM_TYPES:
        return None
    if node.type == FUNCTION_ITEM and is_method(node):
        logger.debug(f"Skipping method at line {_line(node)}")
        return None

    decl = _LOWERERS[node.type](node)
    if decl is None:
        logger.debug(f"Skipping anonymous {node.type} at line {_line(node)}")
    return decl


def iter_declarations(tree: Tree) -> Iterator[Declaration]:
    """Yield every tracked declaration in source (pre-order) order.

    Descends into every nested scope (modules, function bodies, impl blocks,
    blocks) so nested items are found too.

    Args:
        tree: The parsed syntax tree.

    Yields:
        Parser-neutral declarations.
    """
    stack = list(reversed(tree.root_node.named_children))
    while stack:
        node = stack.pop()
        if node.type in OPAQUE_SUBTREES:
            continue
        decl = lower_declaration(node)
        if decl is not None:
            yield decl
        stack.extend(reversed(node.named_children))


def extract_declarations_from_tree(tree: Tree) -> List[Declaration]:
    """Lower all declarations of a parsed compilation unit into a list."""
    declarations = list(iter_declarations(tree))
    logger.debug(f"Lowered {len(declarations)} declarations")
    return declarations
