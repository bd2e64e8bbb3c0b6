"""Stremio addon that serves streams from a Bitmagnet torrent index."""
