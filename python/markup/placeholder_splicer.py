import re
from typing import Callable, Dict, Iterable, List, Mapping, Tuple

from colored_logger import get_colored_logger
from .blocks import CONTENT_KINDS, PLACEHOLDER_PATTERN, AnnotationBlock, BlockKind
from .errors import DanglingPlaceholderError, MissingPlaceholderError
from .fragment_renderer import render_block

logger = get_colored_logger(__name__)

# A token on its own line may come back wrapped in a paragraph
_TOKEN_OCCURRENCE = re.compile(
    r"<p>\s*(" + PLACEHOLDER_PATTERN.pattern + r")\s*</p>"
    r"|(" + PLACEHOLDER_PATTERN.pattern + r")"
)

_KINDS_BY_NAME = {kind.value: kind for kind in BlockKind}


class PlaceholderSplicer:
    """
    Puts rendered fragments back where their blocks were extracted.

    Every block must find its placeholder exactly once and no placeholder may
    be left over; either failure raises.
    """

    def __init__(self, renderer: Callable[[AnnotationBlock], str] = render_block):
        self.renderer = renderer

    def splice(
        self,
        transformed_markup: str,
        blocks_by_kind: Mapping[BlockKind, Iterable[AnnotationBlock]],
    ) -> str:
        """
        Replace each block's placeholder with its rendered fragment.

        Args:
            transformed_markup: Body after markdown-to-HTML conversion
            blocks_by_kind: Blocks from TagExtractor, keyed by kind

        Returns:
            Final markup with every placeholder resolved

        Raises:
            MissingPlaceholderError: a block's placeholder is not in the markup
            DanglingPlaceholderError: a placeholder has no block left to fill it
        """
        occurrences = self._find_occurrences(transformed_markup)
        replacements: List[Tuple[int, int, str]] = []

        for kind in CONTENT_KINDS:
            for block in sorted(blocks_by_kind.get(kind, ()), key=lambda b: b.ordinal):
                key = (block.kind, block.ordinal)
                positions = occurrences.get(key)
                if not positions:
                    raise MissingPlaceholderError(
                        f"No placeholder for {kind.value} block {block.ordinal}",
                        token=block.token.render(),
                    )
                start, end = positions.pop(0)
                replacements.append((start, end, self.renderer(block)))

        leftovers = sorted(
            (start, key) for key, positions in occurrences.items() for start, _ in positions
        )
        if leftovers:
            start, (kind, ordinal) = leftovers[0]
            token = f"{kind.value}:{ordinal}" if isinstance(kind, BlockKind) else str(kind)
            raise DanglingPlaceholderError(
                f"Placeholder {token} at offset {start} has no matching block",
                token=token,
            )

        pieces = []
        cursor = 0
        for start, end, fragment in sorted(replacements):
            pieces.append(transformed_markup[cursor:start])
            pieces.append(fragment)
            cursor = end
        pieces.append(transformed_markup[cursor:])

        logger.debug("Spliced %d fragments", len(replacements))
        return "".join(pieces)

    @staticmethod
    def _find_occurrences(markup: str) -> Dict[Tuple, List[Tuple[int, int]]]:
        occurrences: Dict[Tuple, List[Tuple[int, int]]] = {}
        for match in _TOKEN_OCCURRENCE.finditer(markup):
            token_text = match.group(1) or match.group(4)
            token = PLACEHOLDER_PATTERN.match(token_text)
            kind = _KINDS_BY_NAME.get(token.group(1), token.group(1))
            key = (kind, int(token.group(2)))
            occurrences.setdefault(key, []).append((match.start(), match.end()))
        return occurrences


def splice(
    transformed_markup: str,
    blocks_by_kind: Mapping[BlockKind, Iterable[AnnotationBlock]],
) -> str:
    """Module-level shortcut for PlaceholderSplicer().splice()."""
    return PlaceholderSplicer().splice(transformed_markup, blocks_by_kind)
