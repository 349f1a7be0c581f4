"""Tests for C declaration parsing."""

from __future__ import annotations

import pytest
from vk_registry.builder.declarations import (
    DeclarationError,
    parse_declaration,
    parse_define,
    parse_funcpointer,
    parse_pointer,
    parse_tail,
)
from vk_registry.reader import read_document


class TestParseDeclaration:
    """Tests for parse_declaration."""

    def test_plain_member(self) -> None:
        """Should parse a value member."""
        decl = parse_declaration(read_document("<member><type>uint32_t</type> <name>width</name></member>"))
        assert decl.name == "width"
        assert decl.type_name == "uint32_t"
        assert decl.pointer is None
        assert decl.pointer_depth == 0
        assert decl.code == "uint32_t width"

    def test_const_pointer(self) -> None:
        """Should parse const pointers."""
        decl = parse_declaration(
            read_document(
                '<member optional="true">const <type>void</type>*     <name>pNext</name></member>'
            )
        )
        assert decl.is_const
        assert decl.pointer is not None
        assert decl.pointer.depth == 1
        assert decl.pointer.is_const
        assert decl.optional == ("true",)

    def test_const_pointer_to_const_pointer(self) -> None:
        """Should parse ``const char* const*``."""
        decl = parse_declaration(
            read_document(
                '<member len="enabledExtensionCount,null-terminated">'
                "const <type>char</type>* const*      <name>ppEnabledExtensionNames</name>"
                "</member>"
            )
        )
        assert decl.pointer is not None
        assert decl.pointer.depth == 2
        assert decl.pointer.inner_is_const
        assert decl.len == "enabledExtensionCount,null-terminated"

    def test_struct_keyword(self) -> None:
        """Should record the struct keyword."""
        decl = parse_declaration(
            read_document("<member>struct <type>VkBaseOutStructure</type>* <name>pNext</name></member>")
        )
        assert decl.is_struct
        assert not decl.is_const

    def test_array_from_enum(self) -> None:
        """Should take array sizes from ``<enum>`` children."""
        decl = parse_declaration(
            read_document(
                "<member><type>char</type> <name>deviceName</name>"
                "[<enum>VK_MAX_PHYSICAL_DEVICE_NAME_SIZE</enum>]</member>"
            )
        )
        assert decl.array_shape == ("VK_MAX_PHYSICAL_DEVICE_NAME_SIZE",)

    def test_literal_arrays(self) -> None:
        """Should parse literal and multi-dimensional sizes."""
        decl = parse_declaration(
            read_document("<member><type>float</type> <name>matrix</name>[3][4]</member>")
        )
        assert decl.array_shape == (3, 4)

    def test_bitfield(self) -> None:
        """Should parse bit-field widths."""
        decl = parse_declaration(
            read_document("<member><type>uint32_t</type> <name>instanceCustomIndex</name>:24</member>")
        )
        assert decl.bitfield_width == 24
        assert decl.array_shape == ()

    def test_comment_child_ignored(self) -> None:
        """Should skip ``<comment>`` children."""
        decl = parse_declaration(
            read_document(
                "<member><type>uint32_t</type> <name>flags</name><comment>reserved</comment></member>"
            )
        )
        assert decl.name == "flags"
        assert "reserved" not in decl.code

    def test_param_attributes(self) -> None:
        """Should read parameter attributes from the node."""
        decl = parse_declaration(
            read_document(
                '<param externsync="true" objecttype="objectType">'
                "<type>uint64_t</type> <name>objectHandle</name></param>"
            )
        )
        assert decl.externsync == "true"
        assert decl.objecttype == "objectType"

    def test_missing_name(self) -> None:
        """Should raise E303 when ``<name>`` is missing."""
        with pytest.raises(DeclarationError) as exc_info:
            parse_declaration(read_document("<member><type>uint32_t</type> width</member>"))
        assert exc_info.value.code == "E303"

    def test_missing_type(self) -> None:
        """Should raise E303 when ``<type>`` is missing."""
        with pytest.raises(DeclarationError) as exc_info:
            parse_declaration(read_document("<param>int <name>x</name></param>"))
        assert exc_info.value.code == "E303"


class TestPointerAndTail:
    """Tests for the qualifier helpers."""

    def test_pointer_spacing(self) -> None:
        """Should ignore spacing between stars."""
        pointer = parse_pointer(" * * ", is_const=False)
        assert pointer is not None
        assert pointer.depth == 2
        assert parse_pointer("   ", is_const=False) is None

    def test_unsupported_pointer(self) -> None:
        """Should raise E302 for qualifiers it cannot interpret."""
        with pytest.raises(DeclarationError) as exc_info:
            parse_pointer("***", is_const=False)
        assert exc_info.value.code == "E302"

    def test_tail(self) -> None:
        """Should return array shape or bit-field width."""
        assert parse_tail("[2]") == ((2,), None)
        assert parse_tail(":8") == ((), 8)
        assert parse_tail("") == ((), None)


class TestParseFuncpointer:
    """Tests for parse_funcpointer."""

    def test_legacy_no_params(self) -> None:
        """Should parse ``(void)`` parameter lists as empty."""
        node = read_document(
            '<type category="funcpointer">'
            "typedef void (VKAPI_PTR *<name>PFN_vkVoidFunction</name>)(void);</type>"
        )
        funcpointer = parse_funcpointer(node)
        assert funcpointer.proto.name == "PFN_vkVoidFunction"
        assert funcpointer.proto.type_name == "void"
        assert funcpointer.proto.pointer is None
        assert funcpointer.params == ()

    def test_legacy_with_params(self) -> None:
        """Should parse return pointers and typed parameters."""
        node = read_document(
            '<type category="funcpointer">'
            "typedef void* (VKAPI_PTR *<name>PFN_vkAllocationFunction</name>)(\n"
            "    <type>void</type>*       pUserData,\n"
            "    <type>size_t</type>      size);</type>"
        )
        funcpointer = parse_funcpointer(node)
        assert funcpointer.proto.type_name == "void"
        assert funcpointer.proto.pointer_depth == 1
        assert [p.name for p in funcpointer.params] == ["pUserData", "size"]
        assert funcpointer.params[0].pointer_depth == 1
        assert funcpointer.params[1].type_name == "size_t"
        assert funcpointer.params[1].pointer is None

    def test_legacy_const_param(self) -> None:
        """Should carry const from the text before a parameter type."""
        node = read_document(
            '<type category="funcpointer">'
            "typedef void (VKAPI_PTR *<name>PFN_vkDebugCallback</name>)(\n"
            "    <type>uint32_t</type> flags,\n"
            "    const <type>char</type>* pMessage);</type>"
        )
        params = parse_funcpointer(node).params
        assert not params[0].is_const
        assert params[1].is_const
        assert params[1].pointer_depth == 1

    def test_proto_form(self) -> None:
        """Should parse the ``<proto>``/``<param>`` form."""
        node = read_document(
            '<type category="funcpointer">'
            "<proto><type>void</type>* (VKAPI_PTR *<name>PFN_vkReallocationFunction</name>)</proto>"
            "<param><type>void</type>* <name>pUserData</name></param>"
            "<param><type>size_t</type> <name>size</name></param>"
            "</type>"
        )
        funcpointer = parse_funcpointer(node)
        assert funcpointer.proto.name == "PFN_vkReallocationFunction"
        assert funcpointer.proto.pointer_depth == 1
        assert [p.type_name for p in funcpointer.params] == ["void", "size_t"]

    def test_legacy_missing_name(self) -> None:
        """Should raise E303 without a ``<name>``."""
        node = read_document('<type category="funcpointer">typedef void (VKAPI_PTR *PFN_x)(void);</type>')
        with pytest.raises(DeclarationError) as exc_info:
            parse_funcpointer(node)
        assert exc_info.value.code == "E303"


class TestParseDefine:
    """Tests for parse_define."""

    def test_object_like(self) -> None:
        """Should return the macro value."""
        spec = parse_define("#define VK_UUID_SIZE 16")
        assert spec.value == "16"
        assert spec.params == ()

    def test_function_like(self) -> None:
        """Should return the macro parameters and body."""
        spec = parse_define(
            "#define VK_MAKE_API_VERSION(variant, major, minor, patch) "
            "((((uint32_t)(variant)) << 29U) | (((uint32_t)(major)) << 22U))"
        )
        assert spec.params == ("variant", "major", "minor", "patch")
        assert spec.expression is not None
        assert spec.expression.startswith("((((uint32_t)(variant))")

    def test_defref_makes_expression(self) -> None:
        """Should treat bodies referring to other defines as expressions."""
        spec = parse_define(
            "#define VK_API_VERSION_1_0 VK_MAKE_API_VERSION(0, 1, 0, 0)",
            defref=("VK_MAKE_API_VERSION",),
        )
        assert spec.value is None
        assert spec.expression == "VK_MAKE_API_VERSION(0, 1, 0, 0)"
        assert spec.defref == ("VK_MAKE_API_VERSION",)

    def test_leading_comment(self) -> None:
        """Should keep the first leading comment."""
        spec = parse_define("// Version of this file\n#define VK_HEADER_VERSION 250")
        assert spec.comment == "Version of this file"
        assert spec.value == "250"

    def test_fully_commented_out(self) -> None:
        """Should mark defines made only of comments as disabled."""
        spec = parse_define("// #define VK_API_VERSION 1")
        assert spec.is_disabled
        assert spec.value is None

    def test_struct_forward_declaration(self) -> None:
        """Should mark struct forward declarations as replacement text."""
        spec = parse_define("struct ANativeWindow;")
        assert spec.replace
        assert spec.is_disabled

    def test_other_directive(self) -> None:
        """Should keep other preprocessor text verbatim."""
        spec = parse_define("#ifndef VK_USE_64_BIT_PTR_DEFINES\n#endif")
        assert spec.replace
        assert spec.expression is not None

    def test_empty_define(self) -> None:
        """Should accept a define with no body."""
        spec = parse_define("#define VKAPI_PTR")
        assert spec.value is None
        assert spec.expression is None

    def test_unterminated_comment(self) -> None:
        """Should raise E302 for an unterminated block comment."""
        with pytest.raises(DeclarationError) as exc_info:
            parse_define("/* broken #define X 1")
        assert exc_info.value.code == "E302"
