"""Audio carrier: transcript-to-time projection and WAV muting."""

from .projector import project, merge_ranges, transcript_text
from .transcript import parse_timestamped_transcript, parse_vosk_result, Transcriber, VoskTranscriber
from .wav import WavHeader, parse_wav_header, mute_pcm_stream, mute_wav

__all__ = [
    "project",
    "merge_ranges",
    "transcript_text",
    "parse_timestamped_transcript",
    "parse_vosk_result",
    "Transcriber",
    "VoskTranscriber",
    "WavHeader",
    "parse_wav_header",
    "mute_pcm_stream",
    "mute_wav",
]
