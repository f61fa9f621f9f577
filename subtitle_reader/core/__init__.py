"""Core read pipeline: line extraction, alignment, synchronization.

Pure data in, pure data out. Nothing in this package imports a speech,
rendering, or GUI library; bs4 is used only to walk already-rendered HTML.
"""
