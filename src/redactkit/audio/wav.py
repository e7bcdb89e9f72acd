"""WAV muter.

- Processes 16-bit linear PCM WAV files only; anything else is rejected.
- Zeroes sample bytes inside the given time ranges (milliseconds).
- Header bytes (everything before the data chunk) and any trailing chunks
  are copied verbatim, so output length == input length.
- Always writes a new file via `atomic_output`; the source is never opened
  for writing.

Byte math per mute range:
    bytes_per_ms = sample_rate * channels * bytes_per_sample / 1000
    window = [start_ms * bytes_per_ms, end_ms * bytes_per_ms)
The window is widened to whole sample frames and intersected with each
streamed chunk.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import BinaryIO, Iterable, List, Optional, Tuple
import logging
import math
import os
import shutil
import struct

from ..errors import InputFormatError, RedactKitError
from ..pipeline.context import CancelToken, TimeRange, check_cancel
from ..pipeline.results import MuteResult, failure
from ..storage.writer import atomic_output
from .projector import merge_ranges

log = logging.getLogger("redactkit.audio.wav")

BUFFER_SIZE = 32 * 1024
WAVE_FORMAT_PCM = 1
SUPPORTED_BIT_DEPTH = 16

@dataclass(frozen=True)
class WavHeader:
    audio_format: int
    channels: int
    sample_rate: int
    bits_per_sample: int
    block_align: int
    data_start: int   # offset in bytes where sample data begins
    data_size: int    # bytes in data chunk (clamped to what the file holds)

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def bytes_per_ms(self) -> float:
        return self.sample_rate * self.channels * self.bytes_per_sample / 1000.0

def parse_wav_header(fp: BinaryIO) -> WavHeader:
    """Walk RIFF chunks to find `fmt ` and `data`. Raises InputFormatError."""
    fp.seek(0, os.SEEK_END)
    length = fp.tell()
    fp.seek(0)
    head = fp.read(12)
    if len(head) < 12 or head[:4] != b"RIFF" or head[8:12] != b"WAVE":
        raise InputFormatError("not a RIFF/WAVE file")

    fmt: Optional[Tuple[int, int, int, int, int]] = None
    data: Optional[Tuple[int, int]] = None
    pos = 12
    while pos + 8 <= length:
        fp.seek(pos)
        chunk_id, chunk_size = struct.unpack("<4sI", fp.read(8))
        body = pos + 8
        if chunk_id == b"fmt ":
            if chunk_size < 16:
                raise InputFormatError(f"fmt chunk too short ({chunk_size} bytes)")
            audio_format, channels, sample_rate, _byte_rate, block_align, bits = struct.unpack("<HHIIHH", fp.read(16))
            fmt = (audio_format, channels, sample_rate, block_align, bits)
        elif chunk_id == b"data":
            available = length - body
            if chunk_size > available:
                log.warning(f"data chunk declares {chunk_size} bytes but file holds {available}; using {available}")
                chunk_size = available
            data = (body, chunk_size)
            if fmt is not None:
                break
        # chunks are word aligned
        pos = body + chunk_size + (chunk_size & 1)

    if fmt is None or data is None:
        raise InputFormatError("fmt or data chunk not found in WAV")
    audio_format, channels, sample_rate, block_align, bits = fmt
    return WavHeader(
        audio_format=audio_format,
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits,
        block_align=block_align,
        data_start=data[0],
        data_size=data[1],
    )

def check_supported(header: WavHeader) -> None:
    if header.audio_format != WAVE_FORMAT_PCM:
        raise InputFormatError(
            f"Unsupported WAV audio format (only PCM={WAVE_FORMAT_PCM} supported). Found audioFormat={header.audio_format}"
        )
    if header.bits_per_sample != SUPPORTED_BIT_DEPTH:
        raise InputFormatError(
            f"Unsupported bitsPerSample (only {SUPPORTED_BIT_DEPTH}-bit supported). Found {header.bits_per_sample}"
        )
    if header.channels < 1 or header.sample_rate < 1:
        raise InputFormatError(f"Invalid WAV: channels={header.channels} sample_rate={header.sample_rate}")

def byte_windows(ranges: Iterable[TimeRange], bytes_per_ms: float, frame_size: int) -> List[Tuple[int, int]]:
    windows = []
    for r in merge_ranges(ranges):
        start = int(math.floor(r.start_ms * bytes_per_ms / frame_size)) * frame_size
        end = int(math.ceil(r.end_ms * bytes_per_ms / frame_size)) * frame_size
        if start < end:
            windows.append((start, end))
    return windows

def mute_pcm_stream(
    src: BinaryIO,
    dst: BinaryIO,
    *,
    channels: int,
    sample_rate: int,
    bit_depth: int,
    data_size: int,
    ranges: Iterable[TimeRange],
    chunk_size: int = BUFFER_SIZE,
    cancel: Optional[CancelToken] = None,
) -> int:
    """Copy `data_size` PCM bytes from src to dst, zeroing the mute windows.

    Returns the number of bytes zeroed.
    """
    if bit_depth != SUPPORTED_BIT_DEPTH:
        raise InputFormatError(f"Unsupported bit depth {bit_depth}; only {SUPPORTED_BIT_DEPTH}-bit PCM is supported")
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    bytes_per_sample = bit_depth // 8
    frame_size = channels * bytes_per_sample
    bytes_per_ms = sample_rate * channels * bytes_per_sample / 1000.0
    windows = byte_windows(ranges, bytes_per_ms, frame_size)

    processed = 0
    zeroed = 0
    while processed < data_size:
        check_cancel(cancel)
        buf = bytearray(src.read(min(chunk_size, data_size - processed)))
        if not buf:
            log.warning(f"PCM stream ended early at {processed}/{data_size} bytes")
            break
        chunk_start = processed
        chunk_end = processed + len(buf)
        for mute_start, mute_end in windows:
            a = max(chunk_start, mute_start)
            b = min(chunk_end, mute_end)
            if a < b:
                buf[a - chunk_start:b - chunk_start] = bytes(b - a)
                zeroed += b - a
        dst.write(buf)
        processed = chunk_end
    return zeroed

def mute_wav(
    src_path: str,
    dst_path: str,
    ranges: Iterable[TimeRange],
    *,
    chunk_size: int = BUFFER_SIZE,
    cancel: Optional[CancelToken] = None,
) -> MuteResult:
    """Mute time ranges of a 16-bit PCM WAV into a new file."""
    merged = merge_ranges(ranges)
    if not os.path.exists(src_path):
        log.error(f"Input file does not exist: {src_path}")
        return failure(MuteResult, FileNotFoundError(f"input file does not exist: {src_path}"))
    if os.path.abspath(src_path) == os.path.abspath(dst_path):
        return failure(MuteResult, ValueError("destination must differ from source"))

    try:
        with open(src_path, "rb") as src:
            header = parse_wav_header(src)
            check_supported(header)
            with atomic_output(dst_path) as out:
                src.seek(0)
                out.write(src.read(header.data_start))
                zeroed = mute_pcm_stream(
                    src,
                    out,
                    channels=header.channels,
                    sample_rate=header.sample_rate,
                    bit_depth=header.bits_per_sample,
                    data_size=header.data_size,
                    ranges=merged,
                    chunk_size=chunk_size,
                    cancel=cancel,
                )
                # trailing chunks (LIST, cue, ...) verbatim
                shutil.copyfileobj(src, out)
    except (RedactKitError, OSError, struct.error) as e:
        log.error(f"WAV mute failed for {src_path}: {e}")
        return failure(MuteResult, e, ranges=merged)

    log.info(f"WAV mute succeeded. ranges={len(merged)} bytes_zeroed={zeroed} output={dst_path}")
    return MuteResult(ok=True, output_path=dst_path, ranges=merged, bytes_zeroed=zeroed)
