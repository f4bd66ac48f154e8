"""Math API - authenticated arbitrary-precision arithmetic over HTTP."""

__version__ = "0.1.0"
