"""M-PESA Tracker - parse, categorize and store M-PESA payment notifications"""

__version__ = "0.1.0"
