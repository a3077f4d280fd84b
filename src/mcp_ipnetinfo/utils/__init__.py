"""Address codec and classification helpers."""
