"""
Infraction Reporter - traffic infraction reports from vehicle photos.
"""

__version__ = "0.1.0"
