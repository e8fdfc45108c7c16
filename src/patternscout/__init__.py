"""patternscout - hybrid search and fuzzy ranking for design-pattern recommendations.

This package turns a free-text problem description into a ranked list of
design-pattern recommendations, combining dense (embedding) and sparse
(keyword) retrieval with a fuzzy-logic confidence refinement.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.4.0"
