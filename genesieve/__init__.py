# File: genesieve/__init__.py
# Location: genesieve/genesieve/__init__.py

"""
genesieve Package.

This package ranks candidate disease genes for a cohort by streaming annotated
variants through an ordered pipeline of variant filters, gene filters and
gene prioritisers.
"""

from .version import __version__
