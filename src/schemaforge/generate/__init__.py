"""IR construction and the generation pipeline."""

from schemaforge.generate.builder import UnitBuilder, build_unit, default_expression
from schemaforge.generate.pipeline import GenerationResult, generate

__all__ = [
    "GenerationResult",
    "UnitBuilder",
    "build_unit",
    "default_expression",
    "generate",
]
