"""
Healthcare Management API

A FastAPI-based backend for booking healthcare appointments, with patient
authentication and symptom-based doctor recommendations.
"""

__version__ = "1.0.0"
