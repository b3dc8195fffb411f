"""Assembler and cycle simulator for a grid of small 8-bit cores."""

__version__ = "0.1.0"