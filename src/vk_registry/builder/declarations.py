"""Parsing of C declarations embedded in mixed markup.

Members, parameters and prototypes are written as C with the interesting
tokens wrapped in elements::

    <member>const <type>void</type>* <name>pNext</name></member>
    <member><type>char</type> <name>deviceName</name>[<enum>VK_MAX_PHYSICAL_DEVICE_NAME_SIZE</enum>]</member>
    <member><type>uint32_t</type> <name>instanceCustomIndex</name>:24</member>

The helpers here turn such nodes into ``Declaration`` models.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from vk_registry.models.types import Declaration, DefineSpec, FunctionPointer, PointerKind
from vk_registry.reader import ElementNode


class DeclarationError(ValueError):
    """A declaration could not be parsed.

    ``code`` is the build error code to report (missing element or
    invalid value).
    """

    def __init__(self, code: str, message: str) -> None:
        """Initialize DeclarationError.

        Args:
        ----
            code: Build error code.
            message: Description of the problem.

        """
        self.code = code
        super().__init__(message)


MISSING_ELEMENT = "E303"
INVALID_VALUE = "E302"

_ARRAY_DIM = re.compile(r"\[\s*([^\]]*?)\s*\]")
_BITFIELD = re.compile(r"^\s*:\s*(\d+)")
_FUNCPTR_PREFIX = re.compile(r"typedef\s+(?P<ret>.*?)\s*\(\s*VKAPI_PTR\s*\*\s*$", re.DOTALL)
_FUNCPTR_PARAM = re.compile(
    r"^(?P<ptr>[\s*]*(?:const\s*\*)?)\s*(?P<name>\w+)\s*(?P<end>[,)])(?P<rest>.*)$",
    re.DOTALL,
)
_DIRECTIVE = re.compile(r"#\s*([a-z]+)")
_DEFINE_HEAD = re.compile(r"#\s*define\s+(?P<name>\w+)(?P<paren>\()?")


@dataclass
class _Parts:
    """Pieces of a declaration split around its ``<type>`` and ``<name>``."""

    pre: str = ""
    type_name: str | None = None
    post: str = ""
    name: str | None = None
    tail: str = ""
    code: str = ""


def parse_qualifiers(text: str) -> tuple[bool, bool]:
    """Return (is_const, is_struct) from the text before ``<type>``."""
    words = text.split()
    return "const" in words, "struct" in words


def parse_pointer(text: str, is_const: bool) -> PointerKind | None:
    """Parse the text between ``<type>`` and ``<name>``.

    Accepts ``*``, ``**`` and ``* const*`` (with any spacing).

    Raises
    ------
        DeclarationError: For any other non-blank text.

    """
    compact = "".join(text.split())
    if not compact:
        return None
    if compact == "*":
        return PointerKind(depth=1, is_const=is_const)
    if compact == "**":
        return PointerKind(depth=2, is_const=is_const)
    if compact == "*const*":
        return PointerKind(depth=2, is_const=is_const, inner_is_const=True)
    raise DeclarationError(INVALID_VALUE, f"Unsupported pointer qualifier '{text.strip()}'")


def parse_tail(text: str) -> tuple[tuple[int | str, ...], int | None]:
    """Parse array dimensions and bit-field width after ``<name>``.

    Dimensions are ints for literal sizes and constant names otherwise.
    """
    match = _BITFIELD.match(text)
    if match:
        return (), int(match.group(1))
    shape: list[int | str] = []
    for dim in _ARRAY_DIM.findall(text):
        shape.append(int(dim) if dim.isdigit() else dim)
    return tuple(shape), None


def _split(node: ElementNode) -> _Parts:
    parts = _Parts()
    code: list[str] = []
    for child in node.children:
        if isinstance(child, str):
            code.append(child)
            if parts.type_name is None:
                parts.pre += child
            elif parts.name is None:
                parts.post += child
            else:
                parts.tail += child
            continue

        if child.tag == "comment":
            continue
        code.append(child.text)
        if child.tag == "type" and parts.type_name is None:
            parts.type_name = child.text.strip()
        elif child.tag == "name" and parts.name is None and parts.type_name is not None:
            parts.name = child.text.strip()
        elif parts.name is not None:
            # <enum> array sizes
            parts.tail += child.text
        elif parts.type_name is None:
            parts.pre += child.text
        else:
            parts.post += child.text
    parts.code = "".join(code).strip()
    return parts


def parse_declaration(node: ElementNode) -> Declaration:
    """Parse a ``<member>``, ``<param>`` or ``<proto>`` node.

    Attributes common to members and parameters (``len``, ``optional``,
    ``externsync``...) are read from the node itself.

    Args:
    ----
        node: The element holding the declaration.

    Returns:
    -------
        The parsed declaration.

    Raises:
    ------
        DeclarationError: If ``<type>`` or ``<name>`` is missing, or a
            qualifier cannot be interpreted.

    """
    parts = _split(node)
    if parts.type_name is None:
        raise DeclarationError(MISSING_ELEMENT, f"<{node.tag}> has no <type> element")
    if parts.name is None:
        raise DeclarationError(MISSING_ELEMENT, f"<{node.tag}> has no <name> element")

    is_const, is_struct = parse_qualifiers(parts.pre)
    pointer = parse_pointer(parts.post, is_const)
    array_shape, bitfield_width = parse_tail(parts.tail)

    return Declaration(
        name=parts.name,
        type_name=parts.type_name,
        pointer=pointer,
        is_const=is_const,
        is_struct=is_struct,
        array_shape=array_shape,
        bitfield_width=bitfield_width,
        len=node.get("len"),
        altlen=node.get("altlen"),
        optional=node.get("optional"),
        noautovalidity=node.get("noautovalidity") == "true",
        externsync=node.get("externsync"),
        objecttype=node.get("objecttype"),
        code=parts.code,
    )


def _legacy_funcpointer(node: ElementNode) -> FunctionPointer:
    """Parse ``typedef R (VKAPI_PTR *<name>PFN_x</name>)(<type>T</type> a, ...);``."""
    before: list[str] = []
    return_type: str | None = None
    name: str | None = None
    after: list[ElementNode | str] = []
    for child in node.children:
        if name is not None:
            after.append(child)
        elif isinstance(child, str):
            before.append(child)
        elif child.tag == "name":
            name = child.text.strip()
        elif child.tag == "type":
            return_type = child.text.strip()
            before.append(child.text)

    if name is None:
        raise DeclarationError(MISSING_ELEMENT, "funcpointer has no <name> element")

    match = _FUNCPTR_PREFIX.search("".join(before))
    if match is None:
        raise DeclarationError(INVALID_VALUE, f"Cannot parse funcpointer prototype of '{name}'")
    ret = match.group("ret").strip()
    ret_is_const, _ = parse_qualifiers(ret)
    ret_pointer = PointerKind(depth=1, is_const=ret_is_const) if ret.endswith("*") else None
    if return_type is None:
        return_type = ret.rstrip("*").replace("const", "").strip()

    proto = Declaration(name=name, type_name=return_type, pointer=ret_pointer, is_const=ret_is_const)

    params: list[Declaration] = []
    head = after[0] if after and isinstance(after[0], str) else ""
    head = head.strip()
    if head.endswith(";") and not any(isinstance(c, ElementNode) for c in after):
        # ")(void);"
        return FunctionPointer(proto=proto, params=())

    pre = head.lstrip(")").strip().lstrip("(")
    index = 1 if after and isinstance(after[0], str) else 0
    while index < len(after):
        type_node = after[index]
        if not isinstance(type_node, ElementNode) or type_node.tag != "type":
            raise DeclarationError(MISSING_ELEMENT, f"funcpointer '{name}' parameter has no <type>")
        text = after[index + 1] if index + 1 < len(after) else ""
        if not isinstance(text, str):
            raise DeclarationError(INVALID_VALUE, f"Cannot parse parameters of funcpointer '{name}'")
        param = _FUNCPTR_PARAM.match(text)
        if param is None:
            raise DeclarationError(INVALID_VALUE, f"Cannot parse parameters of funcpointer '{name}'")

        is_const, is_struct = parse_qualifiers(pre)
        params.append(
            Declaration(
                name=param.group("name"),
                type_name=type_node.text.strip(),
                pointer=parse_pointer(param.group("ptr"), is_const),
                is_const=is_const,
                is_struct=is_struct,
                code=f"{pre}{type_node.text}{text.split(param.group('end'))[0]}".strip(),
            )
        )
        if param.group("end") == ")":
            break
        pre = param.group("rest")
        index += 2

    return FunctionPointer(proto=proto, params=tuple(params))


def parse_funcpointer(node: ElementNode) -> FunctionPointer:
    """Parse a ``category="funcpointer"`` type.

    Both the legacy single-text form and the ``<proto>``/``<param>`` form
    are accepted.
    """
    proto_node = node.find("proto")
    if proto_node is None:
        return _legacy_funcpointer(node)

    parts = _split(proto_node)
    if parts.type_name is None or parts.name is None:
        raise DeclarationError(MISSING_ELEMENT, "funcpointer <proto> needs <type> and <name>")
    is_const, _ = parse_qualifiers(parts.pre)
    # "R* (VKAPI_PTR *" : only a '*' before the parenthesis belongs to the return type
    ret_pointer_text = parts.post.split("(")[0]
    proto = Declaration(
        name=parts.name,
        type_name=parts.type_name,
        pointer=PointerKind(depth=1, is_const=is_const) if "*" in ret_pointer_text else None,
        is_const=is_const,
        code=parts.code,
    )
    params = tuple(parse_declaration(p) for p in node.findall("param"))
    return FunctionPointer(proto=proto, params=params)


def _strip_leading_comments(code: str) -> tuple[str, str | None]:
    comment: str | None = None
    text = code.lstrip()
    while text.startswith(("//", "/*")):
        if text.startswith("//"):
            end = text.find("\n")
            line = text[2:] if end < 0 else text[2:end]
            text = "" if end < 0 else text[end + 1 :]
        else:
            end = text.find("*/")
            if end < 0:
                raise DeclarationError(INVALID_VALUE, "Unterminated block comment in define")
            line = text[2:end]
            text = text[end + 2 :]
        if comment is None:
            comment = line.strip()
        text = text.lstrip()
    return text, comment


def parse_define(code: str, defref: tuple[str, ...] = ()) -> DefineSpec:
    """Interpret the body of a ``category="define"`` type.

    Args:
    ----
        code: Full text of the type element, ``<name>`` contents included.
        defref: Names of other defines referenced through ``<type>`` children.

    Returns:
    -------
        DefineSpec describing the macro.

    Examples:
    --------
        >>> parse_define("#define VK_UUID_SIZE 16").value
        '16'
        >>> parse_define("#define VK_MAKE_VERSION(major, minor, patch) (x)").params
        ('major', 'minor', 'patch')

    """
    text, comment = _strip_leading_comments(code)

    if not text:
        # Everything commented out
        return DefineSpec(is_disabled=True, comment=comment, defref=defref)

    if text.startswith("struct "):
        # Forward declaration masquerading as a define
        return DefineSpec(
            expression=code, replace=True, is_disabled=True, comment=comment, defref=defref
        )

    directive = _DIRECTIVE.match(text)
    if directive is None or directive.group(1) != "define":
        return DefineSpec(expression=code, replace=True, comment=comment, defref=defref)

    head = _DEFINE_HEAD.match(text)
    if head is None:
        raise DeclarationError(INVALID_VALUE, "#define without a macro name")

    rest = text[head.end() :]
    if head.group("paren"):
        close = rest.find(")")
        if close < 0:
            raise DeclarationError(INVALID_VALUE, f"Unterminated parameter list in '{head.group('name')}'")
        params = tuple(p.strip() for p in rest[:close].split(",") if p.strip())
        return DefineSpec(
            expression=rest[close + 1 :].strip(), params=params, comment=comment, defref=defref
        )

    body = rest.strip()
    if not body:
        return DefineSpec(comment=comment, defref=defref)
    if defref:
        return DefineSpec(expression=body, comment=comment, defref=defref)
    return DefineSpec(value=body, comment=comment, defref=defref)
