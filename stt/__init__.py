# STT module - Speech-to-Text processing
# Stateless per call; can be swapped without touching other modules

from .whisper_engine import WhisperEngine, STTConfig

__all__ = ["WhisperEngine", "STTConfig"]
