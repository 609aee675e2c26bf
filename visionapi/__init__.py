"""
Vision overlay service: cloud image analysis with detection overlays
"""

__version__ = "1.0.0"
