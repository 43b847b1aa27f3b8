import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from colored_logger import get_colored_logger
from .blocks import (
    CONTENT_KINDS,
    AnnotationBlock,
    ArticleMeta,
    BlockKind,
    PlaceholderToken,
    parse_payload,
)
from .errors import BlockParseError, MetaParseError

logger = get_colored_logger(__name__)

_KINDS_BY_NAME = {kind.value: kind for kind in BlockKind}

MARKER_LINE = re.compile(
    r"[ \t]*@(" + "|".join(re.escape(k.value) for k in BlockKind) + r")(?=[\s{]|$)"
)
HEADING_LINE = re.compile(r" {0,3}#{1,6}(?:[ \t]|$)")
FENCE_LINE = re.compile(r" {0,3}(```|~~~)")


@dataclass(frozen=True)
class ExtractionResult:
    """Cleaned body plus the typed blocks removed from it."""

    cleaned_body: str
    meta: ArticleMeta
    blocks_by_kind: Dict[BlockKind, Tuple[AnnotationBlock, ...]]
    errors: Tuple[BlockParseError, ...] = ()
    has_meta: bool = False

    @property
    def block_count(self) -> int:
        return sum(len(blocks) for blocks in self.blocks_by_kind.values())

    def blocks_in_source_order(self) -> List[AnnotationBlock]:
        blocks = [b for kind_blocks in self.blocks_by_kind.values() for b in kind_blocks]
        return sorted(blocks, key=lambda b: b.line)


@dataclass
class _Marker:
    kind: BlockKind
    line_start: int  # offset of the marker's line
    payload_start: int  # offset just after the marker word
    region_end: int  # offset of the next boundary line, or len(text)
    line: int


@dataclass
class _Excision:
    start: int
    end: int
    replacement: str


class TagExtractor:
    """
    Scans an article for annotation blocks and lifts them out of the body.

    Markers (@meta, @quiz, @memory-card, @exercise, @dse-important) are only
    recognized at the start of a line and outside fenced code. A block runs
    from its marker to the next marker, the next heading or the end of the
    text. JSON payloads are delimited by a brace scanner, so trailing prose in
    the region stays in the body.
    """

    def __init__(self, meta_defaults: Optional[Dict[str, Any]] = None):
        self.meta_defaults = meta_defaults

    def extract(self, raw_text: str, source_name: Optional[str] = None) -> ExtractionResult:
        """
        Extract meta and annotation blocks from raw article text.

        Args:
            raw_text: Article markdown with inline annotation blocks
            source_name: File name used in error messages and as the fallback id

        Returns:
            ExtractionResult with placeholders in place of every parsed block

        Raises:
            MetaParseError: if the @meta block is present but cannot be parsed
        """
        document = source_name or "<text>"
        markers = self._scan_markers(raw_text)

        meta: Optional[ArticleMeta] = None
        excisions: List[_Excision] = []
        errors: List[BlockParseError] = []
        blocks: Dict[BlockKind, List[AnnotationBlock]] = {k: [] for k in CONTENT_KINDS}

        for marker in markers:
            if marker.kind is BlockKind.META:
                if meta is not None:
                    logger.warning(
                        "Ignoring extra @meta block in %s at line %d", document, marker.line
                    )
                    continue
                meta, end = self._parse_meta(raw_text, marker, document, source_name)
                excisions.append(_Excision(marker.line_start, end, ""))
                continue

            try:
                payload, end = self._parse_block(raw_text, marker)
            except (ValueError, RecursionError) as e:
                error = BlockParseError(
                    marker.kind.value,
                    marker.line,
                    str(e),
                    raw_text[marker.line_start : marker.region_end],
                )
                logger.warning("Leaving malformed block in %s: %s", document, error)
                errors.append(error)
                continue

            kind_blocks = blocks[marker.kind]
            block = AnnotationBlock(
                kind=marker.kind,
                ordinal=len(kind_blocks),
                payload=payload,
                line=marker.line,
                raw_text=raw_text[marker.line_start : end],
            )
            kind_blocks.append(block)
            excisions.append(
                _Excision(marker.line_start, end, self._placeholder(block.token))
            )

        cleaned = self._apply_excisions(raw_text, excisions).lstrip("\n")

        if meta is None:
            meta = ArticleMeta.empty(source_name, self.meta_defaults)
        elif meta.missing_fields:
            logger.warning(
                "Article %s is missing meta fields: %s",
                meta.id,
                ", ".join(meta.missing_fields),
            )

        result = ExtractionResult(
            cleaned_body=cleaned,
            meta=meta,
            blocks_by_kind={kind: tuple(b) for kind, b in blocks.items()},
            errors=tuple(errors),
            has_meta=any(m.kind is BlockKind.META for m in markers),
        )
        logger.debug(
            "Extracted %d blocks from %s (%d malformed)",
            result.block_count,
            document,
            len(errors),
        )
        return result

    def _scan_markers(self, text: str) -> List[_Marker]:
        """Single pass over lines collecting markers and their region ends."""
        markers: List[_Marker] = []
        open_marker: Optional[_Marker] = None
        in_fence = False
        offset = 0

        for line_no, line in enumerate(text.splitlines(keepends=True), 1):
            if FENCE_LINE.match(line):
                in_fence = not in_fence
            elif not in_fence:
                marker_match = MARKER_LINE.match(line)
                is_boundary = marker_match is not None or HEADING_LINE.match(line)

                if is_boundary and open_marker is not None:
                    open_marker.region_end = offset
                    open_marker = None

                if marker_match:
                    open_marker = _Marker(
                        kind=_KINDS_BY_NAME[marker_match.group(1)],
                        line_start=offset,
                        payload_start=offset + marker_match.end(),
                        region_end=len(text),
                        line=line_no,
                    )
                    markers.append(open_marker)

            offset += len(line)

        return markers

    def _parse_meta(
        self,
        text: str,
        marker: _Marker,
        document: str,
        source_name: Optional[str],
    ) -> Tuple[ArticleMeta, int]:
        try:
            data, end = self._read_json(text, marker)
        except (ValueError, RecursionError) as e:
            raise MetaParseError(document, str(e)) from e

        if not isinstance(data, dict):
            raise MetaParseError(document, "meta payload must be a JSON object")

        return ArticleMeta.from_payload(data, source_name, self.meta_defaults), end

    def _parse_block(self, text: str, marker: _Marker) -> Tuple[Any, int]:
        if marker.kind.is_json:
            data, end = self._read_json(text, marker)
        else:
            data = text[marker.payload_start : marker.region_end]
            end = marker.region_end
        return parse_payload(marker.kind, data), end

    def _read_json(self, text: str, marker: _Marker) -> Tuple[Any, int]:
        """Decode the balanced {...} span that follows a marker."""
        start = marker.payload_start
        while start < marker.region_end and text[start].isspace():
            start += 1

        if start >= marker.region_end or text[start] != "{":
            raise ValueError("expected '{' after marker")

        end = find_balanced_end(text, start, marker.region_end)
        return json.loads(text[start:end]), end

    @staticmethod
    def _placeholder(token: PlaceholderToken) -> str:
        # Blank lines on both sides keep the token a raw HTML block for markdown
        return f"\n\n{token.render()}\n\n"

    @staticmethod
    def _apply_excisions(text: str, excisions: List[_Excision]) -> str:
        pieces = []
        cursor = 0
        for excision in sorted(excisions, key=lambda e: e.start):
            pieces.append(text[cursor : excision.start])
            pieces.append(excision.replacement)
            cursor = excision.end
        pieces.append(text[cursor:])
        return "".join(pieces)


def find_balanced_end(text: str, start: int, limit: int) -> int:
    """
    Return the offset just past the bracket that closes text[start].

    JSON string literals and their escapes are skipped. Raises ValueError if the
    span is not closed before limit.
    """
    depth = 0
    in_string = False
    escaped = False

    for pos in range(start, limit):
        ch = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return pos + 1
            if depth < 0:
                break

    raise ValueError("unbalanced braces in payload")
