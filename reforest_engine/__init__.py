"""
Reforestation recommendation engine.

Matches soil sensor readings against a tree species reference dataset to
recommend the most suitable seedlings, and analyses reading histories for
soil moisture and pH trends.
"""

__version__ = "0.1.0"
