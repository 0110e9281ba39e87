"""
ordhook - signed webhook that inscribes files with the ord wallet.
"""

__version__ = "0.1.0"
