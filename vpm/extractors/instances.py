"""Line-local module instantiation extractor."""

from __future__ import annotations

import re
from typing import List

from .base import ReferenceExtractor


class InstanceExtractor(ReferenceExtractor):
    """Detects `type instance (` instantiations one line at a time.

    This is a best-effort heuristic rather than a parser. Instantiations split
    across lines are missed, unrelated constructs shaped like ``a b (`` are
    reported, and only the first match on each line counts. Duplicate
    references are kept in the order they appear.
    """

    PATTERN = re.compile(r"\b(\w+)\s+\w+\s*\(")

    def extract(self, text: str) -> List[str]:
        references: List[str] = []
        for line in text.split("\n"):
            match = self.PATTERN.search(line)
            if match:
                references.append(match.group(1))
        return references
