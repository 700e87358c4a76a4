"""
Tests for platform settings: logging wiring and usage billing configuration.
"""
