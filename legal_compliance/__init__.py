"""Lawyer attestation and client consent compliance service"""

__version__ = "0.1.0"
