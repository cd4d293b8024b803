"""
Inheritance mode analysis for genesieve.

The analyser sets per-gene compatibility with Mendelian modes of inheritance.
It is run once per analysis, before the first inheritance-mode dependent step.
"""

from .analyser import InheritanceModeAnalyser

__all__ = ["InheritanceModeAnalyser"]
