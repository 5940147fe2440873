"""
Tests for the Code Entity Model.

Organization
------------
- TestPositions: CodePosition / CodeRange ordering
- TestFunctions: CodeFunction spans and signatures
- TestStructureArena: CodeFile.add_structure and traversal
- TestArenaValidation: rejection of malformed trees
"""

import pytest
from pydantic import ValidationError

from issuescope.codemodel import (
    AnnotationValue,
    CodeAnnotation,
    CodeFile,
    CodeFunction,
    CodeParameter,
    CodePosition,
    CodeRange,
    CodeStructure,
    StructureType,
)


def pos(row: int, column: int = 0) -> CodePosition:
    return CodePosition(row=row, column=column)


def make_structure(name: str, canonical: str, **kwargs) -> CodeStructure:
    return CodeStructure(name=name, canonical_name=canonical, **kwargs)


@pytest.fixture
def user_file() -> CodeFile:
    """User.java with a nested Builder and a doubly nested Step."""
    code_file = CodeFile(name="User.java", path="src/User.java", language="java")
    outer = code_file.add_structure(
        make_structure("User", "com.example.User", start=pos(0), end=pos(40))
    )
    builder = code_file.add_structure(
        make_structure("Builder", "com.example.User.Builder", start=pos(10), end=pos(30)),
        parent_id=outer,
    )
    code_file.add_structure(
        make_structure("Step", "com.example.User.Builder.Step", type=StructureType.ENUM),
        parent_id=builder,
    )
    code_file.add_structure(make_structure("Role", "com.example.Role", type=StructureType.ENUM))
    return code_file


class TestPositions:
    """Tests for positions and ranges."""

    def test_positions_are_zero_based_and_non_negative(self):
        with pytest.raises(ValidationError):
            CodePosition(row=-1, column=0)

    def test_ordering(self):
        assert pos(1, 5) < pos(2, 0)
        assert pos(2, 0) <= pos(2, 0)

    def test_range_rejects_end_before_start(self):
        with pytest.raises(ValidationError):
            CodeRange(start=pos(5), end=pos(4))

    def test_range_contains(self):
        span = CodeRange(start=pos(2, 4), end=pos(6, 1))

        assert span.contains(pos(3))
        assert not span.contains(pos(6, 2))
        assert span.line_count == 5


class TestFunctions:
    """Tests for CodeFunction."""

    def test_to_range(self):
        function = CodeFunction(name="getUser", start=pos(3, 2), end=pos(9, 3))

        span = function.to_range()

        assert span.start == pos(3, 2)
        assert span.end == pos(9, 3)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            CodeFunction(name="broken", start=pos(9), end=pos(3))

    def test_signature(self):
        function = CodeFunction(
            name="find",
            parameters=[CodeParameter(name="id", type="String"), CodeParameter(name="opts")],
            return_type="User",
        )

        assert function.signature == "find(id: String, opts) -> User"

    def test_annotation_lookup(self):
        annotation = CodeAnnotation(
            name="GetMapping", key_values=[AnnotationValue(key="path", value="/users")]
        )

        assert annotation.get("path") == "/users"
        assert annotation.get("method") is None


class TestStructureArena:
    """Tests for building and walking the structure tree."""

    def test_ids_and_links(self, user_file):
        user, builder, step, role = user_file.structures

        assert [s.id for s in user_file.structures] == [0, 1, 2, 3]
        assert builder.parent_id == user.id
        assert user.child_ids == [builder.id]
        assert step.parent_id == builder.id
        assert role.parent_id is None

    def test_top_level_structures(self, user_file):
        assert [s.name for s in user_file.top_level_structures] == ["User", "Role"]

    def test_walk_is_depth_first_preorder(self, user_file):
        assert [s.name for s in user_file.walk_structures()] == [
            "User",
            "Builder",
            "Step",
            "Role",
        ]

    def test_depth_and_children(self, user_file):
        assert user_file.depth_of(2) == 2
        assert [c.name for c in user_file.children_of(0)] == ["Builder"]

    def test_add_structure_copies_input(self):
        """
        GIVEN one structure object added to two files
        WHEN the first file nests a child under it
        THEN the second file's copy is unaffected.
        """
        shared = make_structure("Shared", "pkg.Shared")
        first = CodeFile(name="A.java", path="A.java", language="java")
        second = CodeFile(name="B.java", path="B.java", language="java")

        parent = first.add_structure(shared)
        second.add_structure(shared)
        first.add_structure(make_structure("Inner", "pkg.Shared.Inner"), parent_id=parent)

        assert first.structures[0].child_ids == [1]
        assert second.structures[0].child_ids == []
        assert shared.id == -1

    def test_constructor_copies_structures(self):
        """
        GIVEN two files constructed from the same structure object
        WHEN one file nests a child under it
        THEN the other file's arena still validates with no children.
        """
        outer = make_structure("Outer", "pkg.Outer", id=0)
        file_a = CodeFile(name="A.java", path="A.java", language="java", structures=[outer])
        file_b = CodeFile(name="B.java", path="B.java", language="java", structures=[outer])

        file_b.add_structure(make_structure("Inner", "pkg.Outer.Inner"), parent_id=0)

        assert file_b.structures[0].child_ids == [1]
        assert file_a.structures[0].child_ids == []
        assert outer.child_ids == []
        CodeFile.model_validate(file_a.model_dump())

    def test_constructor_copies_methods_and_functions(self):
        method = CodeFunction(name="run", start=pos(1), end=pos(2))
        first = make_structure("A", "pkg.A", methods=[method])
        second = make_structure("B", "pkg.B", methods=[method])
        code_file = CodeFile(name="a.py", path="a.py", language="python", functions=[method])

        first.methods[0].name = "renamed"

        assert second.methods[0].name == "run"
        assert code_file.functions[0].name == "run"
        assert method.name == "run"
        assert code_file.functions[0] is not method

    def test_duplicate_canonical_name_rejected(self, user_file):
        with pytest.raises(ValueError):
            user_file.add_structure(make_structure("User", "com.example.User"))

    def test_unknown_parent_rejected(self, user_file):
        with pytest.raises(ValueError):
            user_file.add_structure(make_structure("X", "com.example.X"), parent_id=99)

    def test_structures_by_name(self, user_file):
        assert user_file.structures_by_name()["com.example.Role"].type == StructureType.ENUM


class TestArenaValidation:
    """Tests for validation of arenas supplied directly."""

    def test_id_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            CodeFile(
                name="A.java",
                path="A.java",
                language="java",
                structures=[make_structure("A", "A", id=5)],
            )

    def test_inconsistent_back_link_rejected(self):
        with pytest.raises(ValidationError):
            CodeFile(
                name="A.java",
                path="A.java",
                language="java",
                structures=[
                    make_structure("A", "A", id=0, child_ids=[1]),
                    make_structure("B", "B", id=1),
                ],
            )

    def test_cycle_rejected(self):
        with pytest.raises(ValidationError):
            CodeFile(
                name="A.java",
                path="A.java",
                language="java",
                structures=[
                    make_structure("A", "A", id=0, parent_id=1, child_ids=[1]),
                    make_structure("B", "B", id=1, parent_id=0, child_ids=[0]),
                ],
            )

    def test_valid_serialized_tree_accepted(self, user_file):
        rebuilt = CodeFile.model_validate(user_file.model_dump())

        assert [s.name for s in rebuilt.walk_structures()] == [
            "User",
            "Builder",
            "Step",
            "Role",
        ]
