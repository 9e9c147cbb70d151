"""
Original Manuscripts reader core.

Parallel Greek/English verses with transliteration, synchronized
read-along highlighting and scored pronunciation practice.
"""

__version__ = "1.0.0"
