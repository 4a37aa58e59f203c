"""
bookingengine - pricing and availability engine for small service businesses.
"""

__version__ = "0.1.0"
