"""
Deepmetric Analytics Institute backend.

Course catalog, enrollment, completion approval and the AI course advisor.
"""

__version__ = "1.0.0"
