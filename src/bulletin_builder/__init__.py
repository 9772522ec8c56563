"""
BULLETIN BUILDER - Report card aggregation engine
Turn per-subject grade entries into period report cards: average, mention and class rank
"""

__version__ = "1.0.0"
