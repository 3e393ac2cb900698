"""
                Foodles Ordering Backend

Payment verification, order notification fan-out (customer email,
vendor email, vendor missed call) and live restaurant status for the
Foodles food-ordering site, with hybrid Mock/Real provider architecture.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
