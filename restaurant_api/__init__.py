"""
                Restaurant Ordering API

Backend for a restaurant website: customer accounts, menu browsing and
administration, order placement with status tracking, and a contact inbox.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
