"""
Utility Modules for tts-bridge.

    - timeit.py: Wall-clock timing for conversion stages
"""
