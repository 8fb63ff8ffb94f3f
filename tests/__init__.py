"""
Test suite for the Healthcare Management API.

Contains unit tests for the doctor recommendation resolver and API tests for
authentication, doctors and appointments.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
