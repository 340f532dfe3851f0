"""
Elicit: Survey Data Model and Response-Addressing Protocol

A type declares a structured set of questions (a survey) and later
rebuilds an instance of itself from a flat collection of typed answers.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Terminal prompts, TUI or GUI widgets
    - Document rendering (HTML, PDF, markup)
    - How a question tree is derived from a type

This package defines SURVEY STRUCTURE and RESPONSE ADDRESSING only.

Presentation happens in collection surfaces (see `elicit.backends`).
All surfaces consume the same question tree and produce the same
flat response store.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
