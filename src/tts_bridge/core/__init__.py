"""
Core Infrastructure for tts-bridge.

This package provides foundational components:
    - config.py: Settings loading and validation
    - errors.py: Exception hierarchy with error codes
    - logging/: Structured logging with numeric levels
    - requirements.py: Provider SDK availability checks
"""
