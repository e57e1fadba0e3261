"""
JobTrackr - personal job application tracker.
"""

__version__ = "1.0.0"
