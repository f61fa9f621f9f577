"""Subtitle Reader: speak a document aloud with synchronized captions.

WHY: A speech engine reads one long string and reports positions in it.
A caption can only show a short fragment at a time. This package joins
the two: it cuts a document into caption-sized units, builds the string
the engine will read, and maps every reported position back to a unit.

HOW: Pipeline of render (markdown) → extract lines → align (sanitize,
segment, index) → speak → synchronize. The core is pure; speech, fonts,
and windows are adapters. Front ends: CLI, Tk caption window, HTTP API.

RULES:
- All front ends share the same ReadPlan and synchronizer
- One read session at a time per SubtitleReader; a new read replaces it
- Segmentation and sanitizing live in the caption_units library
"""

__version__ = "0.1.0"
