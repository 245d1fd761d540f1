"""
MediSys: hospital assistant that routes each request to a specialised Gemini agent.
"""

__version__ = "0.1.0"
