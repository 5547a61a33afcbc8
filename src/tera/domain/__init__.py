"""Domain layer: stations, playback, blocklist and voting."""
