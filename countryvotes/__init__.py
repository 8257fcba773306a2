"""
Country votes: one vote per email, countries ranked by votes and enriched
with REST Countries metadata.
"""

__version__ = "1.0.0"
