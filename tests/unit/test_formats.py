"""Unit tests for the format parsers."""

import io
from pathlib import Path

import pytest

from niddb.core.exceptions import MalformedDocumentError
from niddb.formats import (
    InputFormat,
    PsplibdocParser,
    VitaJsonParser,
    VitaYamlParser,
    detect_format,
    get_parser,
)
from niddb.formats.models import ParsedLibrary
from niddb.formats.scalars import parse_bool, parse_hex_u32, parse_u32


def parse_xml(text: str) -> list[ParsedLibrary]:
    return list(PsplibdocParser().parse(io.BytesIO(text.encode()), Path("test.xml")))


def parse_json(text: str) -> list[ParsedLibrary]:
    return list(VitaJsonParser().parse(io.BytesIO(text.encode()), Path("test.json")))


def parse_yaml(text: str) -> list[ParsedLibrary]:
    return list(VitaYamlParser().parse(io.BytesIO(text.encode()), Path("test.yml")))


class TestScalars:
    """Tests for scalar conversions."""

    def test_parse_u32(self) -> None:
        assert parse_u32("42") == 42
        assert parse_u32("0x2A") == 42
        assert parse_u32("0XFFFFFFFF") == 0xFFFFFFFF
        assert parse_u32(" 7 ") == 7

    @pytest.mark.parametrize("text", ["", "0x", "abc", "-1", "0x100000000", "12ab"])
    def test_parse_u32_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_u32(text)

    def test_parse_hex_u32(self) -> None:
        assert parse_hex_u32("0x935CD196") == 0x935CD196
        assert parse_hex_u32("935cd196") == 0x935CD196

    def test_parse_bool(self) -> None:
        assert parse_bool("true") is True
        assert parse_bool("False") is False
        assert parse_bool("yes") is True
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestDetectFormat:
    """Tests for extension dispatch."""

    def test_known_extensions(self) -> None:
        assert detect_format(Path("a.xml")) is InputFormat.MARKUP
        assert detect_format(Path("a.json")) is InputFormat.DOCUMENT
        assert detect_format(Path("a.yml")) is InputFormat.LINES
        assert detect_format(Path("a.YAML")) is InputFormat.LINES

    def test_unknown_extension(self) -> None:
        assert detect_format(Path("a.txt")) is None
        assert detect_format(Path("noext")) is None

    def test_get_parser(self) -> None:
        assert isinstance(get_parser(InputFormat.MARKUP), PsplibdocParser)
        assert get_parser(InputFormat.LINES).supports(Path("db.yml"))


class TestPsplibdocParser:
    """Tests for the lenient XML parser."""

    def test_parse_library(self) -> None:
        libs = parse_xml(
            """<PSPLIBDOC><PRXFILES><PRXFILE>
                <PRX>flash0:/kd/ctrl.prx</PRX><PRXNAME>sceController_Service</PRXNAME>
                <LIBRARIES><LIBRARY>
                    <NAME>sceCtrl</NAME><FLAGS>0x40010000</FLAGS>
                    <FUNCTIONS>
                        <FUNCTION><NID>0x6A2774F3</NID><NAME>sceCtrlSetSamplingCycle</NAME></FUNCTION>
                        <FUNCTION><NID>1F4011E6</NID><NAME>sceCtrlSetSamplingMode</NAME></FUNCTION>
                    </FUNCTIONS>
                    <VARIABLES>
                        <VARIABLE><NID>0x00000010</NID><NAME>ctrlVar</NAME></VARIABLE>
                    </VARIABLES>
                </LIBRARY></LIBRARIES>
            </PRXFILE></PRXFILES></PSPLIBDOC>"""
        )

        assert len(libs) == 1
        lib = libs[0]
        assert lib.library_name == "sceCtrl"
        assert lib.image_name == "sceController_Service"
        assert lib.image_file == "flash0:/kd/ctrl.prx"
        assert lib.flags == 0x40010000
        assert [(s.name, s.nid) for s in lib.functions] == [
            ("sceCtrlSetSamplingCycle", 0x6A2774F3),
            ("sceCtrlSetSamplingMode", 0x1F4011E6),
        ]
        assert [(s.name, s.nid) for s in lib.variables] == [("ctrlVar", 0x10)]

    def test_skips_incomplete_entries(self) -> None:
        libs = parse_xml(
            """<PSPLIBDOC><PRXFILES><PRXFILE>
                <PRXNAME>mod</PRXNAME>
                <LIBRARIES>
                    <LIBRARY><FLAGS>0x1</FLAGS></LIBRARY>
                    <LIBRARY><NAME>Lib</NAME><FUNCTIONS>
                        <FUNCTION><NAME>NoNid</NAME></FUNCTION>
                        <FUNCTION><NID>0x1</NID></FUNCTION>
                        <FUNCTION><NID>zz</NID><NAME>BadNid</NAME></FUNCTION>
                        <FUNCTION><NID>0x2</NID><NAME>Good</NAME></FUNCTION>
                    </FUNCTIONS></LIBRARY>
                </LIBRARIES>
            </PRXFILE></PRXFILES></PSPLIBDOC>"""
        )

        assert [lib.library_name for lib in libs] == ["Lib"]
        assert [s.name for s in libs[0].functions] == ["Good"]
        assert libs[0].flags == 0
        assert libs[0].image_file == "unknown.prx"

    def test_prxfile_without_name_is_skipped(self) -> None:
        libs = parse_xml(
            """<PSPLIBDOC><PRXFILES><PRXFILE>
                <PRX>a.prx</PRX>
                <LIBRARIES><LIBRARY><NAME>Lib</NAME></LIBRARY></LIBRARIES>
            </PRXFILE></PRXFILES></PSPLIBDOC>"""
        )
        assert libs == []

    def test_other_root_yields_nothing(self) -> None:
        assert parse_xml("<OTHER><PRXFILES/></OTHER>") == []

    def test_malformed_xml(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_xml("<PSPLIBDOC><PRXFILES></PSPLIBDOC>")

        assert exc_info.value.line == 1


class TestVitaJsonParser:
    """Tests for the strict JSON parser."""

    def test_parse_module(self) -> None:
        libs = parse_json(
            """{"SceLibKernel": {"nid": 1, "modules": {
                "SceLibKernel": {"nid": 3454643, "kernel": false,
                    "functions": {"sceKernelCreateThread": 3366213466},
                    "variables": {"__stack_chk_guard": 2411386106}}}}}"""
        )

        assert len(libs) == 1
        lib = libs[0]
        assert lib.library_name == "SceLibKernel"
        assert lib.image_file == "SceLibKernel"
        assert lib.flags == 3454643
        assert lib.is_kernel is False
        assert [(s.name, s.nid) for s in lib.functions] == [("sceKernelCreateThread", 3366213466)]
        assert [(s.name, s.nid) for s in lib.variables] == [("__stack_chk_guard", 2411386106)]

    def test_variables_optional(self) -> None:
        libs = parse_json(
            '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "kernel": true, "functions": {}}}}}'
        )
        assert libs[0].variables == []
        assert libs[0].is_kernel is True

    @pytest.mark.parametrize(
        ("document", "message"),
        [
            ("[]", "modules is not an object"),
            ('{"L": 1}', "library L is not an object"),
            ('{"L": {"modules": {}}}', "library L: nid is not an integer"),
            ('{"L": {"nid": 0}}', "library L: modules is not an object"),
            ('{"L": {"nid": 0, "modules": {"M": []}}}', "module M is not an object"),
            (
                '{"L": {"nid": 0, "modules": {"M": {"kernel": false, "functions": {}}}}}',
                "module M: nid is not an integer",
            ),
            (
                '{"L": {"nid": 0, "modules": {"M": {"nid": true, "kernel": false, '
                '"functions": {}}}}}',
                "module M: nid is not an integer",
            ),
            (
                '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "functions": {}}}}}',
                "module M: kernel is not a boolean",
            ),
            (
                '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "kernel": false}}}}',
                "module M: functions is not an object",
            ),
            (
                '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "kernel": false, '
                '"functions": {}, "variables": []}}}}',
                "module M: variables is not an object",
            ),
            (
                '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "kernel": false, '
                '"functions": {"f": "0x1"}}}}}',
                "function f: nid is not an integer",
            ),
        ],
    )
    def test_schema_errors(self, document: str, message: str) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_json(document)

        assert message in str(exc_info.value)

    def test_syntax_error_has_position(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_json('{\n  "L": ,\n}')

        assert exc_info.value.line == 2

    def test_out_of_range_nid(self) -> None:
        with pytest.raises(MalformedDocumentError):
            parse_json(
                '{"L": {"nid": 0, "modules": {"M": {"nid": 0, "kernel": false, '
                '"functions": {"f": 4294967296}}}}}'
            )


class TestVitaYamlParser:
    """Tests for the strict YAML parser."""

    SAMPLE = """\
version: 2
modules:
  SceLibKernel:
    nid: 0x0000002A
    libraries:
      SceLibKernel:
        kernel: false
        nid: 0xCAE9ACE6
        functions:
          sceKernelCreateThread: 0xC5C11EE7
          sceKernelExitProcess: 2054380037
        variables:
          __stack_chk_guard: 0x8FB9A1F8
      SceThreadmgrForKernel:
        kernel: true
        functions:
"""

    def test_parse_libraries(self) -> None:
        libs = parse_yaml(self.SAMPLE)

        assert [lib.library_name for lib in libs] == ["SceLibKernel", "SceThreadmgrForKernel"]
        kernel = libs[0]
        assert kernel.flags == 0xCAE9ACE6
        assert kernel.is_kernel is False
        assert [(s.name, s.nid) for s in kernel.functions] == [
            ("sceKernelCreateThread", 0xC5C11EE7),
            ("sceKernelExitProcess", 2054380037),
        ]
        assert [(s.name, s.nid) for s in kernel.variables] == [("__stack_chk_guard", 0x8FB9A1F8)]
        assert libs[1].is_kernel is True
        assert libs[1].functions == []
        assert libs[1].flags == 0

    def test_unknown_library_key(self) -> None:
        document = "modules:\n  M:\n    libraries:\n      L:\n        bogus: 1\n"
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml(document)

        error = exc_info.value
        assert "unrecognised library key 'bogus'" in str(error)
        assert (error.line, error.column) == (5, 9)

    def test_unknown_module_key(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml("modules:\n  M:\n    extra: 1\n")

        assert "unrecognised module key 'extra'" in str(exc_info.value)
        assert exc_info.value.line == 3

    def test_non_scalar_function_value(self) -> None:
        document = (
            "modules:\n  M:\n    libraries:\n      L:\n        functions:\n          f: [1]\n"
        )
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml(document)

        assert "got 'sequence'" in str(exc_info.value)
        assert exc_info.value.line == 6

    def test_bad_nid(self) -> None:
        document = (
            "modules:\n  M:\n    libraries:\n      L:\n        functions:\n          f: 0xZZ\n"
        )
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml(document)

        assert "could not convert function nid '0xZZ'" in str(exc_info.value)

    def test_bad_kernel_flag(self) -> None:
        document = "modules:\n  M:\n    libraries:\n      L:\n        kernel: sometimes\n"
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml(document)

        assert "boolean" in str(exc_info.value)

    def test_root_must_be_mapping(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml("- a\n- b\n")

        assert "root node to be a mapping" in str(exc_info.value)

    def test_multiple_documents(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml("modules: {}\n---\nmodules: {}\n")

        assert "single yaml document" in str(exc_info.value)

    def test_syntax_error_has_position(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml("modules:\n  M: [unclosed\n")

        assert exc_info.value.line is not None

    def test_libraries_before_error_are_yielded(self) -> None:
        document = (
            "modules:\n"
            "  M:\n"
            "    libraries:\n"
            "      Good:\n"
            "        functions:\n"
            "          f: 1\n"
            "      Bad:\n"
            "        bogus: 1\n"
        )
        parsed = []
        with pytest.raises(MalformedDocumentError):
            for lib in VitaYamlParser().parse(io.BytesIO(document.encode()), Path("t.yml")):
                parsed.append(lib.library_name)

        assert parsed == ["Good"]


class TestDeeplyNestedDocuments:
    """Nesting beyond the interpreter's recursion limit is a malformed document."""

    def test_json(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_json("[" * 200000 + "]" * 200000)

        assert "nested too deeply" in str(exc_info.value)

    def test_yaml(self) -> None:
        with pytest.raises(MalformedDocumentError) as exc_info:
            parse_yaml("modules: " + "[" * 5000 + "]" * 5000)

        assert "nested too deeply" in str(exc_info.value)
