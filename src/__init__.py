"""
MRONJ Risk: medication-related osteonecrosis of the jaw risk assessment.
"""

__version__ = "0.1.0"
