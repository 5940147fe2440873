"""
Code Entity Model.

Typed representation of one parsed source file, as produced by an external
parser: the file, its structures (classes, interfaces, enums, structs,
traits, annotations), functions, variables and source positions.

Ownership
---------
Every element belongs to exactly one owner. Element lists passed to a
constructor are deep-copied, and so is the input to ``add_structure``.
Structures, including nested ones, live in a per-file arena
(``CodeFile.structures``); each structure knows its arena ``id``, its
``parent_id`` and its ``child_ids``. Nesting is
therefore a tree of integer references rather than objects holding each
other, and traversal walks id lists iteratively:

    code_file = CodeFile(name="User.java", path="src/User.java", language="java")
    outer = code_file.add_structure(CodeStructure(name="User", ...))
    inner = code_file.add_structure(CodeStructure(name="Builder", ...), parent_id=outer)
    [s.name for s in code_file.walk_structures()]  # ["User", "Builder"]

Rule #9: Complete type hints.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator

ElementT = TypeVar("ElementT", bound=BaseModel)


def _owned(items: Optional[List[ElementT]]) -> Optional[List[ElementT]]:
    """Deep copies of items; the new owner shares no instance with the caller."""
    if items is None:
        return None
    return [item.model_copy(deep=True) for item in items]


class StructureType(str, Enum):
    """Kind of a declared structure."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    STRUCT = "struct"
    ANNOTATION = "annotation"
    TRAIT = "trait"


class CodePosition(BaseModel):
    """Zero-based row/column location in a source file."""

    row: int = Field(..., ge=0, description="Line (0-indexed)")
    column: int = Field(..., ge=0, description="Column (0-indexed)")

    def __lt__(self, other: "CodePosition") -> bool:
        return (self.row, self.column) < (other.row, other.column)

    def __le__(self, other: "CodePosition") -> bool:
        return (self.row, self.column) <= (other.row, other.column)


class CodeRange(BaseModel):
    """Start/end span of an element."""

    start: CodePosition
    end: CodePosition

    @model_validator(mode="after")
    def _check_order(self) -> "CodeRange":
        if self.end < self.start:
            raise ValueError("range end is before start")
        return self

    def contains(self, position: CodePosition) -> bool:
        """True if position falls inside the range (inclusive)."""
        return self.start <= position <= self.end

    @property
    def line_count(self) -> int:
        return self.end.row - self.start.row + 1


class AnnotationValue(BaseModel):
    key: str
    value: str


class CodeAnnotation(BaseModel):
    """Declaration-level annotation, e.g. ``@RequestMapping(path="/users")``."""

    name: str
    key_values: List[AnnotationValue] = Field(default_factory=list)

    def get(self, key: str) -> Optional[str]:
        """Value for key, or None if the annotation does not set it."""
        for item in self.key_values:
            if item.key == key:
                return item.value
        return None


class CodeVariable(BaseModel):
    """A field, constant, parameter-like local, or other named variable."""

    name: str
    type: str = ""
    is_system_type: Optional[bool] = Field(
        None, description="Whether the declared type is a language built-in"
    )


class CodeParameter(BaseModel):
    name: str
    type: str = ""


class _Spanned(BaseModel):
    """Base for elements with a start/end position."""

    start: CodePosition = Field(default_factory=lambda: CodePosition(row=0, column=0))
    end: CodePosition = Field(default_factory=lambda: CodePosition(row=0, column=0))

    @model_validator(mode="after")
    def _check_span(self) -> "_Spanned":
        if self.end < self.start:
            raise ValueError(f"{type(self).__name__} end is before start")
        return self

    def to_range(self) -> CodeRange:
        """Return the element's span as a CodeRange."""
        return CodeRange(start=self.start, end=self.end)


class CodeFunction(_Spanned):
    """A function or method."""

    name: str
    vars: List[CodeVariable] = Field(default_factory=list)
    return_type: Optional[str] = None
    parameters: Optional[List[CodeParameter]] = None
    modifiers: Optional[str] = None
    annotations: Optional[List[CodeAnnotation]] = None

    @field_validator("vars", "parameters", "annotations")
    @classmethod
    def _copy_owned(cls, items: Optional[List[BaseModel]]) -> Optional[List[BaseModel]]:
        return _owned(items)

    @property
    def signature(self) -> str:
        params = ", ".join(
            f"{p.name}: {p.type}" if p.type else p.name for p in self.parameters or []
        )
        suffix = f" -> {self.return_type}" if self.return_type else ""
        return f"{self.name}({params}){suffix}"


class CodeStructure(_Spanned):
    """
    A class-like declaration.

    ``id``, ``parent_id`` and ``child_ids`` are arena references managed by
    the owning CodeFile; leave them at their defaults when constructing a
    structure and let CodeFile.add_structure() assign them.
    """

    name: str
    canonical_name: str = Field(..., description="Fully qualified name")
    type: StructureType = StructureType.CLASS
    package: str = ""
    extends: Optional[List[str]] = None
    implements: List[str] = Field(default_factory=list)
    constants: Optional[List[CodeVariable]] = None
    fields: Optional[List[CodeVariable]] = None
    methods: List[CodeFunction] = Field(default_factory=list)
    annotations: Optional[List[CodeAnnotation]] = None

    id: int = Field(-1, description="Index in the owning file's arena")
    parent_id: Optional[int] = None
    child_ids: List[int] = Field(default_factory=list)

    @field_validator("constants", "fields", "methods", "annotations")
    @classmethod
    def _copy_owned(cls, items: Optional[List[BaseModel]]) -> Optional[List[BaseModel]]:
        return _owned(items)

    def find_method(self, name: str) -> Optional[CodeFunction]:
        for method in self.methods:
            if method.name == name:
                return method
        return None


class CodeFile(BaseModel):
    """A parsed source file and everything it owns."""

    name: str
    path: str
    language: str
    package: str = ""
    imports: List[str] = Field(default_factory=list)
    structures: List[CodeStructure] = Field(
        default_factory=list, description="Arena of all structures, nested included"
    )
    functions: Optional[List[CodeFunction]] = None

    @field_validator("structures", "functions")
    @classmethod
    def _copy_owned(cls, items: Optional[List[BaseModel]]) -> Optional[List[BaseModel]]:
        return _owned(items)

    @model_validator(mode="after")
    def _check_arena(self) -> "CodeFile":
        """
        Validate arena references and canonical-name uniqueness.

        Rule #2: Bounded - each loop visits every structure at most once.
        """
        size = len(self.structures)
        names: Set[str] = set()
        for index, structure in enumerate(self.structures):
            if structure.id != index:
                raise ValueError(
                    f"structure '{structure.name}' has id {structure.id}, expected {index}"
                )
            if structure.canonical_name in names:
                raise ValueError(
                    f"duplicate canonical name '{structure.canonical_name}' in {self.path}"
                )
            names.add(structure.canonical_name)

            parent = structure.parent_id
            if parent is not None:
                if not 0 <= parent < size:
                    raise ValueError(f"structure {index} has unknown parent {parent}")
                if index not in self.structures[parent].child_ids:
                    raise ValueError(
                        f"structure {index} is not listed as a child of {parent}"
                    )
            for child in structure.child_ids:
                if not 0 <= child < size:
                    raise ValueError(f"structure {index} has unknown child {child}")
                if self.structures[child].parent_id != index:
                    raise ValueError(f"structure {child} does not name {index} as parent")

        # Every structure must be reachable from a root exactly once
        visited = sum(1 for _ in self.walk_structures())
        if visited != size:
            raise ValueError(f"structure tree in {self.path} contains a cycle")
        return self

    def add_structure(
        self, structure: CodeStructure, parent_id: Optional[int] = None
    ) -> int:
        """
        Copy a structure into the arena and return its id.

        Args:
            structure: Structure to add (its arena fields are overwritten)
            parent_id: Id of an existing structure to nest under

        Raises:
            ValueError: If parent_id does not name a structure in this file,
                or the canonical name is already taken.
        """
        if parent_id is not None and not 0 <= parent_id < len(self.structures):
            raise ValueError(f"unknown parent structure id: {parent_id}")
        if any(s.canonical_name == structure.canonical_name for s in self.structures):
            raise ValueError(
                f"duplicate canonical name '{structure.canonical_name}' in {self.path}"
            )

        new_id = len(self.structures)
        owned = structure.model_copy(
            deep=True, update={"id": new_id, "parent_id": parent_id, "child_ids": []}
        )
        self.structures.append(owned)
        if parent_id is not None:
            self.structures[parent_id].child_ids.append(new_id)
        return new_id

    def get_structure(self, structure_id: int) -> CodeStructure:
        return self.structures[structure_id]

    @property
    def top_level_structures(self) -> List[CodeStructure]:
        return [s for s in self.structures if s.parent_id is None]

    def children_of(self, structure_id: int) -> List[CodeStructure]:
        return [self.structures[c] for c in self.structures[structure_id].child_ids]

    def walk_structures(self) -> Iterator[CodeStructure]:
        """
        Depth-first, pre-order walk over the structure tree.

        Iterative; a cycle cannot loop forever because each id is emitted
        at most once.
        """
        seen: Set[int] = set()
        stack = [s.id for s in reversed(self.top_level_structures)]
        while stack:
            current = stack.pop()
            if current in seen or not 0 <= current < len(self.structures):
                continue
            seen.add(current)
            structure = self.structures[current]
            yield structure
            stack.extend(reversed(structure.child_ids))

    def depth_of(self, structure_id: int) -> int:
        """Nesting depth of a structure (0 for top-level)."""
        depth = 0
        parent = self.structures[structure_id].parent_id
        while parent is not None and depth <= len(self.structures):
            depth += 1
            parent = self.structures[parent].parent_id
        return depth

    def structures_by_name(self) -> Dict[str, CodeStructure]:
        return {s.canonical_name: s for s in self.structures}
