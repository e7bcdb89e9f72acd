"""Transcriber boundary.

The transcriber consumes mono 16 kHz 16-bit PCM and produces TimedWord
lists. Two wire formats are accepted from it:
- recognizer JSON: {"text": ..., "result": [{"word", "start", "end"}, ...]}
- flattened strings: "my [0.00-0.20] ssn [0.20-0.40] ..."
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
import json
import logging
import os
import re
import wave

from ..errors import InputFormatError, ModelUnavailable
from ..pipeline.context import CancelToken, TimedWord, check_cancel

log = logging.getLogger("redactkit.audio.transcript")

SAMPLE_RATE = 16000
_TIMED_RE = re.compile(r"(\S+)\s*\[([\d.]+)-([\d.]+)\]")
_PUNCT_RE = re.compile(r"[.,?!:;]")

def parse_timestamped_transcript(raw: str) -> List[TimedWord]:
    words: List[TimedWord] = []
    for m in _TIMED_RE.finditer(raw):
        surface = _PUNCT_RE.sub("", m.group(1).strip())
        if not surface:
            continue
        try:
            start, end = float(m.group(2)), float(m.group(3))
        except ValueError:
            log.warning(f"Skipping word with unparsable timing: {m.group(0)!r}")
            continue
        words.append(TimedWord(surface, start, end))
    return words

def format_timestamped_transcript(words: List[TimedWord]) -> str:
    return " ".join(f"{w.surface} [{w.start_sec:.2f}-{w.end_sec:.2f}]" for w in words)

def parse_vosk_result(result: Union[str, Dict[str, Any]]) -> List[TimedWord]:
    data = json.loads(result) if isinstance(result, str) else result
    words: List[TimedWord] = []
    for item in data.get("result") or []:
        surface = str(item.get("word", "")).strip()
        start = item.get("start")
        end = item.get("end")
        if not surface or start is None or end is None or start < 0 or end < 0:
            continue
        words.append(TimedWord(surface, float(start), float(end)))
    return words

class Transcriber(ABC):

    @abstractmethod
    def transcribe(self, wav_path: str, cancel: Optional[CancelToken] = None) -> List[TimedWord]:
        raise NotImplementedError

class VoskTranscriber(Transcriber):
    """Offline recognizer; expects mono 16 kHz 16-bit PCM WAV input."""

    def __init__(self, model_dir: str, chunk_bytes: int = 4096):
        if not os.path.isdir(model_dir):
            raise ModelUnavailable(f"speech model directory not found: {model_dir}")
        try:
            from vosk import Model
        except ImportError as e:
            raise ModelUnavailable("vosk is not installed (pip install 'redactkit[audio]')") from e
        try:
            self.model = Model(model_dir)
        except Exception as e:
            raise ModelUnavailable(f"failed to load speech model {model_dir}: {e}") from e
        self.chunk_bytes = chunk_bytes

    def transcribe(self, wav_path: str, cancel: Optional[CancelToken] = None) -> List[TimedWord]:
        from vosk import KaldiRecognizer

        with wave.open(wav_path, "rb") as wf:
            if wf.getnchannels() != 1 or wf.getsampwidth() != 2 or wf.getframerate() != SAMPLE_RATE:
                raise InputFormatError(
                    f"transcriber needs mono 16-bit {SAMPLE_RATE} Hz PCM, got "
                    f"channels={wf.getnchannels()} width={wf.getsampwidth()} rate={wf.getframerate()}"
                )
            rec = KaldiRecognizer(self.model, SAMPLE_RATE)
            rec.SetWords(True)
            words: List[TimedWord] = []
            while True:
                check_cancel(cancel)
                data = wf.readframes(self.chunk_bytes // 2)
                if not data:
                    break
                if rec.AcceptWaveform(data):
                    words.extend(parse_vosk_result(rec.Result()))
            words.extend(parse_vosk_result(rec.FinalResult()))
        log.info(f"Transcribed {wav_path}: {len(words)} words")
        return words
