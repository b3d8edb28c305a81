"""
Concept Graph
A prerequisite-graph and learning-path engine for organising
learning content into dependency-respecting study sequences.
"""

__version__ = "0.1.0"
