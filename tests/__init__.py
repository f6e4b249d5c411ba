"""
Test suite for the Healthcare Platform API.

Covers password hashing, session tokens, the auth gate, signup/login
and the doctor directory.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
