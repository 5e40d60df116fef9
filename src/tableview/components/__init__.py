"""Qt widgets hosting the recycling table view.

Importing this package requires PyQt6; the rest of ``tableview`` does not.
"""

from __future__ import annotations

from .virtualized_list import VirtualizedList

__all__ = ["VirtualizedList"]
