"""
Logging, metrics, prompt loading and console formatting helpers.
"""
