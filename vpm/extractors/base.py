"""Base classes for reference extractor plugins."""

from abc import ABC, abstractmethod
from typing import List


class ReferenceExtractor(ABC):
    """Contract for extractors that find sub-unit references in source text."""

    @abstractmethod
    def extract(self, text: str) -> List[str]:
        """Return referenced sub-unit names in first-to-last line order."""
