"""
qrfountain: send a byte payload through a one-way stream of QR codes using an
LT fountain code.
"""

__version__ = "0.3.0"
