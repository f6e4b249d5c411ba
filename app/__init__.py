"""
Healthcare Platform API

A FastAPI backend for patient and doctor accounts: signup, JWT login,
role-gated routes and a filterable doctor directory.
"""

__version__ = "1.0.0"
