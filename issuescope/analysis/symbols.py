"""
Symbol analysis types.

Symbols come from an external provider (a language server or the parser
behind the code entity model). Kind codes follow the LSP SymbolKind
numbering; symbols_from_code_file() derives the same records from a parsed
CodeFile.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from issuescope.codemodel import (
    CodeAnnotation,
    CodeFile,
    CodeFunction,
    CodeStructure,
    StructureType,
)

SYMBOL_KIND_NAMES = {
    1: "File",
    2: "Module",
    3: "Namespace",
    4: "Package",
    5: "Class",
    6: "Method",
    7: "Property",
    8: "Field",
    9: "Constructor",
    10: "Enum",
    11: "Interface",
    12: "Function",
    13: "Variable",
    14: "Constant",
    15: "String",
    16: "Number",
    17: "Boolean",
    18: "Array",
    19: "Object",
    20: "Key",
    21: "Null",
    22: "EnumMember",
    23: "Struct",
    24: "Event",
    25: "Operator",
    26: "TypeParameter",
}

STRUCTURE_KINDS = {
    StructureType.CLASS: 5,
    StructureType.INTERFACE: 11,
    StructureType.TRAIT: 11,
    StructureType.ANNOTATION: 11,
    StructureType.ENUM: 10,
    StructureType.STRUCT: 23,
}

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")
UNKNOWN_METHOD = "UNKNOWN"


def symbol_kind_name(kind: int) -> str:
    """Name for an LSP kind code; unknown codes map to 'Unknown'."""
    return SYMBOL_KIND_NAMES.get(kind, "Unknown")


@dataclass(frozen=True)
class SymbolInfo:
    """
    One symbol reported by the provider.

    Attributes:
        name: Short name
        qualified_name: Fully qualified name
        kind: LSP SymbolKind code
        file_path: Absolute (or workspace-relative) path of the declaring file
        line: Zero-based start row
        column: Zero-based start column
        comment: Doc comment or other descriptive text, if any
    """

    name: str
    qualified_name: str
    kind: int
    file_path: str
    line: int = 0
    column: int = 0
    comment: Optional[str] = None

    @property
    def kind_name(self) -> str:
        return symbol_kind_name(self.kind)

    @property
    def description(self) -> str:
        return self.comment or self.qualified_name

    @property
    def search_text(self) -> str:
        """Lower-cased name, qualified name and comment."""
        return f"{self.name} {self.qualified_name} {self.comment or ''}".lower()


@dataclass(frozen=True)
class SymbolAnalysis:
    """Symbol-analysis result for a workspace."""

    symbols: Tuple[SymbolInfo, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbols", tuple(self.symbols))

    def __len__(self) -> int:
        return len(self.symbols)

    @classmethod
    def from_code_files(cls, code_files: Iterable[CodeFile]) -> "SymbolAnalysis":
        symbols: List[SymbolInfo] = []
        for code_file in code_files:
            symbols.extend(symbols_from_code_file(code_file))
        return cls(symbols=tuple(symbols))


def extract_http_method(symbol: SymbolInfo) -> str:
    """
    Infer an HTTP method by verb substring.

    Name and qualified name are checked first, then the comment. Verbs are
    tried in the order of HTTP_METHODS.
    """
    for text in (f"{symbol.name} {symbol.qualified_name}", symbol.comment or ""):
        lowered = text.lower()
        for method in HTTP_METHODS:
            if method in lowered:
                return method.upper()
    return UNKNOWN_METHOD


def _render_annotations(annotations: Optional[List[CodeAnnotation]]) -> Optional[str]:
    """Render annotations as '@Name(k=v, ...)' text, e.g. for route mappings."""
    if not annotations:
        return None
    rendered = []
    for annotation in annotations:
        args = ", ".join(f"{kv.key}={kv.value}" for kv in annotation.key_values)
        rendered.append(f"@{annotation.name}({args})" if args else f"@{annotation.name}")
    return " ".join(rendered)


def _function_symbol(
    function: CodeFunction, qualified_name: str, kind: int, file_path: str
) -> SymbolInfo:
    return SymbolInfo(
        name=function.name,
        qualified_name=qualified_name,
        kind=kind,
        file_path=file_path,
        line=function.start.row,
        column=function.start.column,
        comment=_render_annotations(function.annotations),
    )


def _structure_symbols(structure: CodeStructure, file_path: str) -> List[SymbolInfo]:
    owner = structure.canonical_name
    symbols = [
        SymbolInfo(
            name=structure.name,
            qualified_name=owner,
            kind=STRUCTURE_KINDS.get(structure.type, 5),
            file_path=file_path,
            line=structure.start.row,
            column=structure.start.column,
            comment=_render_annotations(structure.annotations),
        )
    ]
    for method in structure.methods:
        kind = 9 if method.name in (structure.name, "__init__", "constructor") else 6
        symbols.append(
            _function_symbol(method, f"{owner}.{method.name}", kind, file_path)
        )
    for field_var in structure.fields or []:
        symbols.append(
            SymbolInfo(
                name=field_var.name,
                qualified_name=f"{owner}.{field_var.name}",
                kind=8,
                file_path=file_path,
                line=structure.start.row,
                column=structure.start.column,
            )
        )
    for constant in structure.constants or []:
        symbols.append(
            SymbolInfo(
                name=constant.name,
                qualified_name=f"{owner}.{constant.name}",
                kind=22 if structure.type == StructureType.ENUM else 14,
                file_path=file_path,
                line=structure.start.row,
                column=structure.start.column,
            )
        )
    return symbols


def symbols_from_code_file(code_file: CodeFile) -> List[SymbolInfo]:
    """
    Flatten a parsed file into symbol records.

    Structures are visited depth-first (nested ones after their parent),
    followed by top-level functions. Fields and constants carry no position
    of their own and use their structure's start.
    """
    symbols: List[SymbolInfo] = []
    for structure in code_file.walk_structures():
        symbols.extend(_structure_symbols(structure, code_file.path))

    for function in code_file.functions or []:
        qualified = (
            f"{code_file.package}.{function.name}" if code_file.package else function.name
        )
        symbols.append(_function_symbol(function, qualified, 12, code_file.path))
    return symbols
