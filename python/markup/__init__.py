"""
Annotation markup for study articles.

Articles are markdown with inline annotation blocks (@meta, @quiz,
@memory-card, @exercise, @dse-important). The TagExtractor lifts the blocks
out and leaves placeholders; after markdown conversion the PlaceholderSplicer
swaps each placeholder for the fragment rendered from its block.
"""

from .blocks import (
    AnnotationBlock,
    ArticleMeta,
    BlockKind,
    Callout,
    CardFace,
    Exercise,
    MemoryCard,
    PlaceholderToken,
    Quiz,
    QuizOption,
)
from .errors import (
    AnnotationError,
    BlockParseError,
    DanglingPlaceholderError,
    MetaParseError,
    MissingPlaceholderError,
    SpliceError,
)
from .fragment_renderer import render_block, render_fragment
from .placeholder_splicer import PlaceholderSplicer, splice
from .tag_extractor import ExtractionResult, TagExtractor

__all__ = [
    "AnnotationBlock",
    "ArticleMeta",
    "BlockKind",
    "Callout",
    "CardFace",
    "Exercise",
    "MemoryCard",
    "PlaceholderToken",
    "Quiz",
    "QuizOption",
    "AnnotationError",
    "BlockParseError",
    "DanglingPlaceholderError",
    "MetaParseError",
    "MissingPlaceholderError",
    "SpliceError",
    "render_block",
    "render_fragment",
    "PlaceholderSplicer",
    "splice",
    "ExtractionResult",
    "TagExtractor",
]
