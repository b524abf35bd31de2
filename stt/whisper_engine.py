"""
Whisper STT Engine
------------------
Local speech-to-text using Faster-Whisper.
Stateless per call - every transcription decodes the given buffer from
scratch with greedy decoding.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
import logging
import re
import time
import numpy as np

try:
    from faster_whisper import WhisperModel, available_models
except ImportError:
    WhisperModel = None
    available_models = None

from core.errors import InferenceError, ModelLoadError
from core.transcript import Segment

# Hugging Face repository id, e.g. Systran/faster-whisper-small.en
REPO_ID = re.compile(r"[\w.-]+/[\w.-]+")


def is_downloadable(model: str) -> bool:
    """True for faster-whisper preset names and Hugging Face repository ids."""
    return model in available_models() or REPO_ID.fullmatch(model) is not None


@dataclass
class STTConfig:
    """Configuration for the STT engine."""
    model: str = "base.en"      # Model directory, preset name or Hugging Face repo id
    language: Optional[str] = None  # None lets the model detect it
    device: str = "auto"        # auto, cpu, cuda
    compute_type: str = "default"  # default, int8, float16, float32
    sample_rate: int = 16000


class WhisperEngine:
    """
    Faster-Whisper based speech-to-text engine.

    Key constraints:
    - Model is loaded once, at construction
    - Greedy decoding, a single hypothesis
    - Segments come back in model order with centisecond timestamps
    """

    def __init__(self, config: Optional[STTConfig] = None):
        self.config = config or STTConfig()
        self._logger = logging.getLogger("murmur.stt")
        self._model = self._load()

    def _load(self):
        """Load the Whisper model into memory."""
        if WhisperModel is None:
            raise ModelLoadError(
                "faster-whisper is required. Install with: pip install faster-whisper"
            )

        model = self.config.model
        if not is_downloadable(model) and not Path(model).exists():
            raise ModelLoadError(f"Model not found: {model}", {"model": model})

        started = time.monotonic()
        try:
            loaded = WhisperModel(
                model,
                device=self.config.device,
                compute_type=self.config.compute_type
            )
        except Exception as e:
            raise ModelLoadError(f"Failed to load model {model}: {e}", {"model": model}) from e

        self._logger.info(
            f"Loaded model {model} on {self.config.device} "
            f"in {time.monotonic() - started:.1f}s"
        )
        return loaded

    def transcribe(self, samples: Sequence[float]) -> List[Segment]:
        """
        Transcribe a mono 16 kHz buffer into ordered segments.

        Args:
            samples: float32 samples, the full buffer

        Returns:
            Segments in model order, timestamps in centiseconds

        Raises:
            InferenceError: If the model fails
        """
        audio = np.asarray(samples, dtype=np.float32)
        if audio.ndim != 1:
            raise InferenceError(f"Expected mono samples, got shape {audio.shape}")

        if len(audio) == 0:
            return []

        started = time.monotonic()
        try:
            segments, _ = self._model.transcribe(
                audio,
                language=self.config.language,
                beam_size=1,
                best_of=1,
                temperature=0.0,
            )
            # segments is a lazy generator: decoding happens here
            result = [
                Segment.from_seconds(segment.text.strip(), segment.start, segment.end)
                for segment in segments
            ]
        except Exception as e:
            raise InferenceError(f"Model invocation failed: {e}") from e

        self._logger.info(
            f"Transcribed {len(audio) / self.config.sample_rate:.2f}s of audio "
            f"into {len(result)} segments in {time.monotonic() - started:.2f}s"
        )
        return result

    @property
    def model_name(self) -> str:
        return self.config.model
