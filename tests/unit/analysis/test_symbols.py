"""
Tests for symbol analysis types.

Organization
------------
- TestSymbolKinds: LSP kind naming
- TestHttpMethod: extract_http_method
- TestSymbolsFromCodeFile: flattening a parsed CodeFile
"""

from issuescope.analysis.symbols import (
    UNKNOWN_METHOD,
    SymbolAnalysis,
    SymbolInfo,
    extract_http_method,
    symbol_kind_name,
    symbols_from_code_file,
)
from issuescope.codemodel import (
    AnnotationValue,
    CodeAnnotation,
    CodeFile,
    CodeFunction,
    CodePosition,
    CodeStructure,
    CodeVariable,
    StructureType,
)


def make_symbol(name: str, qualified: str = "", comment=None, kind: int = 6) -> SymbolInfo:
    return SymbolInfo(
        name=name,
        qualified_name=qualified or name,
        kind=kind,
        file_path="src/a.ts",
        comment=comment,
    )


class TestSymbolKinds:
    """Tests for kind names."""

    def test_known_kinds(self):
        assert symbol_kind_name(5) == "Class"
        assert symbol_kind_name(6) == "Method"
        assert symbol_kind_name(12) == "Function"
        assert symbol_kind_name(26) == "TypeParameter"

    def test_unknown_kind(self):
        assert symbol_kind_name(0) == "Unknown"
        assert symbol_kind_name(99) == "Unknown"

    def test_description_falls_back_to_qualified_name(self):
        assert make_symbol("run", "jobs.Runner.run").description == "jobs.Runner.run"
        assert make_symbol("run", comment="Starts a job").description == "Starts a job"


class TestHttpMethod:
    """Tests for extract_http_method."""

    def test_method_from_name(self):
        assert extract_http_method(make_symbol("getUser")) == "GET"

    def test_method_from_comment(self):
        symbol = make_symbol("createUser", "api.createUser", comment="POST /users")

        assert extract_http_method(symbol) == "POST"

    def test_name_checked_before_comment(self):
        symbol = make_symbol("deleteUser", comment="POST fallback")

        assert extract_http_method(symbol) == "DELETE"

    def test_unknown(self):
        symbol = make_symbol("refresh", "cache.Cache.refresh")

        assert extract_http_method(symbol) == UNKNOWN_METHOD


class TestSymbolsFromCodeFile:
    """Tests for symbols_from_code_file."""

    def make_controller_file(self) -> CodeFile:
        code_file = CodeFile(
            name="UserController.java",
            path="src/UserController.java",
            language="java",
            package="com.example",
        )
        controller = code_file.add_structure(
            CodeStructure(
                name="UserController",
                canonical_name="com.example.UserController",
                start=CodePosition(row=4, column=0),
                end=CodePosition(row=40, column=1),
                annotations=[
                    CodeAnnotation(
                        name="RequestMapping",
                        key_values=[AnnotationValue(key="path", value="/users")],
                    ),
                    CodeAnnotation(name="Deprecated"),
                ],
                fields=[CodeVariable(name="repo", type="UserRepository")],
                methods=[
                    CodeFunction(
                        name="UserController",
                        start=CodePosition(row=8, column=4),
                        end=CodePosition(row=10, column=5),
                    ),
                    CodeFunction(
                        name="getUser",
                        start=CodePosition(row=12, column=4),
                        end=CodePosition(row=20, column=5),
                        annotations=[
                            CodeAnnotation(
                                name="GetMapping",
                                key_values=[AnnotationValue(key="value", value="/{id}")],
                            )
                        ],
                    ),
                ],
            )
        )
        code_file.add_structure(
            CodeStructure(
                name="Status",
                canonical_name="com.example.UserController.Status",
                type=StructureType.ENUM,
                start=CodePosition(row=30, column=4),
                end=CodePosition(row=33, column=5),
                constants=[CodeVariable(name="ACTIVE")],
            ),
            parent_id=controller,
        )
        code_file.functions = [
            CodeFunction(
                name="helper",
                start=CodePosition(row=50, column=0),
                end=CodePosition(row=55, column=1),
            )
        ]
        return code_file

    def test_symbols_in_walk_order(self):
        symbols = symbols_from_code_file(self.make_controller_file())

        assert [(s.name, s.kind) for s in symbols] == [
            ("UserController", 5),
            ("UserController", 9),
            ("getUser", 6),
            ("repo", 8),
            ("Status", 10),
            ("ACTIVE", 22),
            ("helper", 12),
        ]

    def test_qualified_names_and_positions(self):
        symbols = symbols_from_code_file(self.make_controller_file())
        by_name = {s.qualified_name: s for s in symbols}

        get_user = by_name["com.example.UserController.getUser"]
        assert (get_user.line, get_user.column) == (12, 4)
        assert get_user.file_path == "src/UserController.java"
        assert by_name["com.example.UserController.repo"].line == 4
        assert "com.example.helper" in by_name

    def test_annotations_rendered_as_comment(self):
        symbols = symbols_from_code_file(self.make_controller_file())

        assert symbols[0].comment == "@RequestMapping(path=/users) @Deprecated"
        assert symbols[2].comment == "@GetMapping(value=/{id})"
        assert symbols[3].comment is None

    def test_annotated_method_yields_http_method(self):
        symbols = symbols_from_code_file(self.make_controller_file())

        assert extract_http_method(symbols[2]) == "GET"

    def test_symbol_analysis_from_code_files(self):
        analysis = SymbolAnalysis.from_code_files(
            [self.make_controller_file(), CodeFile(name="e.py", path="e.py", language="python")]
        )

        assert len(analysis) == 7
        assert isinstance(analysis.symbols, tuple)
