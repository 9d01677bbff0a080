"""
Utility Modules for tts-bridge.

    - timeit.py: Wall-clock timing for requests and backend calls
"""
