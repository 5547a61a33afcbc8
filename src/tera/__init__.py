"""Tera - terminal radio player core.

Playback supervision for an external mpv process plus the persistent
blocklist and vote stores the UI layer consults around playback.
"""

__version__ = "3.0.0"
