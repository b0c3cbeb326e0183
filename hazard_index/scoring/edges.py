"""
Persistence of fitted bin edges.

Edges are fit once per hazard and stored by name, so later stages (or a
later run scoring a new historical table) consume exactly the edges that
produced the projected scores.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from hazard_index.scoring.binning import BinEdges

logger = logging.getLogger(__name__)


class EdgeStore:
    """JSON file mapping hazard name to serialized BinEdges."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            return json.load(f)

    def names(self) -> List[str]:
        return sorted(self._read())

    def __contains__(self, hazard: str) -> bool:
        return hazard in self._read()

    def load(self, hazard: str) -> BinEdges:
        """
        Load stored edges for a hazard.

        Raises:
            KeyError: If no edges are stored under that name
        """
        data = self._read()
        if hazard not in data:
            available = ", ".join(sorted(data)) or "none"
            raise KeyError(f"No edges stored for '{hazard}' in {self.path}. Available: {available}")
        return BinEdges.from_dict(data[hazard])

    def load_all(self) -> Dict[str, BinEdges]:
        return {name: BinEdges.from_dict(d) for name, d in self._read().items()}

    def save(self, edges: BinEdges, name: str = None) -> None:
        """Store edges under name, defaulting to edges.hazard."""
        key = name or edges.hazard
        if not key:
            raise ValueError("Edges need a hazard name to be stored")
        data = self._read()
        data[key] = edges.to_dict()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved {key} bin edges to {self.path}")
