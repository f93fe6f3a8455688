"""
Splicer - timeline composition and conflict-resolution engine.

Arranges generated video/audio clips on tracks, keeps a play cursor over the
arrangement, and detects and repairs structural problems: overlaps, gaps and
clips placed out of storyboard order.
"""

__version__ = "0.1.0"
