"""Alien ASCII protocol: framing, setting codecs and tag list parsing."""
