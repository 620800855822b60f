"""Splits a chat message holding several notifications into candidates."""

import logging
import re
from typing import List

from ..models.core import BatchCandidate


logger = logging.getLogger(__name__)


# "<id> Confirmed" anywhere in the text, not only at line starts
BOUNDARY_PATTERN = re.compile(r'\b\w+\s+Confirmed\b', re.IGNORECASE | re.ASCII)

METADATA_PREFIXES = ('c:', 'category:', 'r:', 'reason:')


class BatchSegmenter:
    """Detects batch messages and cuts them at notification boundaries"""

    def count_boundaries(self, text: str) -> int:
        return sum(1 for _ in BOUNDARY_PATTERN.finditer(text))

    def is_batch(self, text: str) -> bool:
        """A message is a batch when it holds more than one notification boundary"""
        return self.count_boundaries(text) > 1

    def segment(self, text: str) -> List[BatchCandidate]:
        """Split text into ordered candidates.

        Each boundary opens a segment that runs until the next boundary. The
        first line of a segment is the notification; later lines are kept only
        when they look like metadata, anything else (promotional footers and
        the like) is dropped.

        Args:
            text: Full chat message

        Returns:
            Candidates in the order they appear in the message
        """
        starts = [match.start() for match in BOUNDARY_PATTERN.finditer(text)]
        if not starts:
            return []

        bounds = starts + [len(text)]
        candidates = []

        for start, end in zip(bounds, bounds[1:]):
            segment = text[start:end].strip()
            if not segment:
                continue

            lines = segment.split('\n')
            metadata = []
            for line in lines[1:]:
                stripped = line.strip()
                if stripped and stripped.lower().startswith(METADATA_PREFIXES):
                    metadata.append(stripped)

            candidates.append(BatchCandidate(message=lines[0].strip(), metadata=metadata))

        logger.debug(f"Segmented message into {len(candidates)} candidates")
        return candidates
