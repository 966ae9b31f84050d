"""
cloudo: fast provisioning of a minimal AWS network.
"""

__version__ = "0.1.0"
