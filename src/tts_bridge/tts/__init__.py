"""
Synthesis Backend Layer.

    - backend.py: BaseSpeechBackend, SynthesisParameters and the backend factory
    - formats.py: Microsoft output-format profiles and their MIME types
    - ssml.py: SSML document construction
    - backends/: edge-tts and Azure REST implementations
"""
