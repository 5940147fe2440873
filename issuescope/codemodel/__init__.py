"""
Code Entity Model.

Structured representation of parsed source files consumed by the analysis
engine. Parsing itself is done elsewhere; this package only defines and
validates the shape.
"""

from issuescope.codemodel.elements import (
    AnnotationValue,
    CodeAnnotation,
    CodeFile,
    CodeFunction,
    CodeParameter,
    CodePosition,
    CodeRange,
    CodeStructure,
    CodeVariable,
    StructureType,
)

__all__ = [
    "AnnotationValue",
    "CodeAnnotation",
    "CodeFile",
    "CodeFunction",
    "CodeParameter",
    "CodePosition",
    "CodeRange",
    "CodeStructure",
    "CodeVariable",
    "StructureType",
]
