"""
splicer.export - Project file export.

Writes the arrangement out for other editors:
- EDL (CMX 3600) - video track events with dissolves
- XMEML - every track as clipitems
- JSON - the timeline document itself (see splicer.project)
"""

from __future__ import annotations
