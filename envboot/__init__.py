"""
envboot - startup-time runtime environment resolver.
"""

__version__ = "0.1.0"
