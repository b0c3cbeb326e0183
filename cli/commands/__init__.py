"""
Hazard Index CLI Commands

Commands:
    score - Score districts from pre-processed hazard inputs
    edges - Show stored bin edges
"""

from cli.commands import edges, score

__all__ = ["edges", "score"]
