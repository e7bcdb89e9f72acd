"""Tests for transcript parsing, time projection and WAV muting."""
import io
import struct
import wave

import numpy as np
import pytest

from conftest import read_samples, write_wav
from redactkit.audio.projector import merge_ranges, project, project_entity, transcript_text, word_spans
from redactkit.audio.transcript import format_timestamped_transcript, parse_timestamped_transcript, parse_vosk_result
from redactkit.audio.wav import mute_pcm_stream, mute_wav, parse_wav_header
from redactkit.errors import AlignmentMiss, InputFormatError
from redactkit.pipeline.context import CancelToken, Entity, TimeRange, TimedWord

WORDS = [
    TimedWord("my", 0.0, 0.2),
    TimedWord("ssn", 0.2, 0.4),
    TimedWord("is", 0.4, 0.5),
    TimedWord("123456789", 0.5, 1.0),
]

class TestProjector:

    def test_transcript_and_spans(self):
        assert transcript_text(WORDS) == "my ssn is 123456789"
        assert word_spans(WORDS) == [(0, 2), (3, 6), (7, 9), (10, 19)]

    def test_projects_single_word(self):
        text = transcript_text(WORDS)
        start = text.index("123456789")
        ent = Entity("SSN", "123456789", start, start + 9)
        assert project(WORDS, [ent]) == [TimeRange(500, 1000)]

    def test_projects_across_words(self):
        assert project(WORDS, [Entity("X", "ssn is", 3, 9)]) == [TimeRange(200, 500)]

    def test_partial_word_maps_to_whole_word(self):
        assert project(WORDS, [Entity("X", "345", 12, 15)]) == [TimeRange(500, 1000)]

    def test_unaligned_entity_is_dropped(self):
        assert project(WORDS, [Entity("X", "?", 40, 45)]) == []
        with pytest.raises(AlignmentMiss):
            project_entity(WORDS, word_spans(WORDS), Entity("X", "?", 40, 45))

    def test_merge_overlapping(self):
        assert merge_ranges([TimeRange(900, 1400), TimeRange(500, 1000)]) == [TimeRange(500, 1400)]

    def test_merge_keeps_gaps(self):
        assert merge_ranges([TimeRange(0, 100), TimeRange(200, 300)]) == [TimeRange(0, 100), TimeRange(200, 300)]

    def test_merge_touching(self):
        assert merge_ranges([TimeRange(0, 100), TimeRange(100, 200)]) == [TimeRange(0, 200)]

    def test_merge_is_idempotent(self):
        rs = [
            TimeRange(900, 1400), TimeRange(500, 1000),
            TimeRange(1400, 1500),
            TimeRange(2000, 2100), TimeRange(0, 100),
        ]
        once = merge_ranges(rs)
        assert once == [TimeRange(0, 100), TimeRange(500, 1500), TimeRange(2000, 2100)]
        assert merge_ranges(once) == once

    def test_projection_is_already_merged(self):
        ents = [Entity("X", "ssn is", 3, 9), Entity("Y", "is 1", 7, 11), Entity("Z", "my", 0, 2)]
        projected = project(WORDS, ents)
        assert projected == [TimeRange(0, 1000)]
        assert merge_ranges(projected) == projected

    def test_reversed_range_is_normalized(self):
        assert TimeRange(900, 500) == TimeRange(500, 900)

class TestTranscriptFormats:

    def test_parse_timestamped(self):
        words = parse_timestamped_transcript("my [0.00-0.20] ssn, [0.20-0.40] is [0.40-0.50]")
        assert [w.surface for w in words] == ["my", "ssn", "is"]
        assert words[1].start_sec == pytest.approx(0.2)

    def test_format_round_trip_shape(self):
        raw = format_timestamped_transcript(WORDS)
        assert raw.startswith("my [0.00-0.20] ssn [0.20-0.40]")
        assert [w.surface for w in parse_timestamped_transcript(raw)] == [w.surface for w in WORDS]

    def test_parse_vosk_result(self):
        raw = '{"text": "call me", "result": [{"word": "call", "start": 0.1, "end": 0.4, "conf": 1.0}, {"word": "me", "start": 0.4, "end": 0.6}]}'
        assert parse_vosk_result(raw) == [TimedWord("call", 0.1, 0.4), TimedWord("me", 0.4, 0.6)]

    def test_parse_vosk_result_without_words(self):
        assert parse_vosk_result({"text": ""}) == []

class TestMutePcmStream:

    def test_zeroes_window(self):
        src = io.BytesIO(b"\x01" * 20)
        dst = io.BytesIO()
        zeroed = mute_pcm_stream(
            src, dst, channels=1, sample_rate=1000, bit_depth=16, data_size=20,
            ranges=[TimeRange(2, 5)], chunk_size=3,
        )
        assert zeroed == 6
        assert dst.getvalue() == b"\x01" * 4 + b"\x00" * 6 + b"\x01" * 10

    def test_rejects_other_bit_depths(self):
        with pytest.raises(InputFormatError):
            mute_pcm_stream(io.BytesIO(), io.BytesIO(), channels=1, sample_rate=8000, bit_depth=24, data_size=0, ranges=[])

class TestMuteWav:

    def test_header(self, wav_file):
        with open(wav_file, "rb") as f:
            h = parse_wav_header(f)
        assert (h.channels, h.sample_rate, h.bits_per_sample) == (1, 16000, 16)
        assert h.data_start == 44
        assert h.bytes_per_ms == 32.0

    def test_mutes_only_the_range(self, wav_file, tmp_path):
        out = tmp_path / "out.wav"
        res = mute_wav(str(wav_file), str(out), [TimeRange(500, 1000)])
        assert res.ok
        assert res.bytes_zeroed == 16000
        samples = read_samples(out)[:, 0]
        assert (samples[8000:16000] == 0).all()
        assert (samples[:8000] == 1000).all()
        assert (samples[16000:] == 1000).all()

    def test_header_and_length_preserved(self, wav_file, tmp_path):
        out = tmp_path / "out.wav"
        mute_wav(str(wav_file), str(out), [TimeRange(100, 200)])
        src_bytes, out_bytes = wav_file.read_bytes(), out.read_bytes()
        assert len(out_bytes) == len(src_bytes)
        assert out_bytes[:44] == src_bytes[:44]

    def test_small_chunks_give_same_output(self, wav_file, tmp_path):
        a, b = tmp_path / "a.wav", tmp_path / "b.wav"
        ranges = [TimeRange(10, 333), TimeRange(700, 705)]
        mute_wav(str(wav_file), str(a), ranges)
        mute_wav(str(wav_file), str(b), ranges, chunk_size=997)
        assert a.read_bytes() == b.read_bytes()

    def test_stereo_frames_muted_together(self, tmp_path):
        src, out = tmp_path / "st.wav", tmp_path / "st_out.wav"
        write_wav(src, seconds=1.0, channels=2)
        res = mute_wav(str(src), str(out), [TimeRange(250, 500)])
        assert res.ok
        samples = read_samples(out)
        assert (samples[4000:8000] == 0).all()
        assert (samples[3999] == 1000).all()
        assert (samples[8000] == 1000).all()

    def test_window_is_frame_aligned(self, tmp_path):
        src, out = tmp_path / "odd.wav", tmp_path / "odd_out.wav"
        write_wav(src, seconds=0.1, rate=11025)
        res = mute_wav(str(src), str(out), [TimeRange(1, 2)])
        assert res.ok
        assert res.bytes_zeroed % 2 == 0
        samples = read_samples(out)[:, 0]
        assert set(np.unique(samples).tolist()) == {0, 1000}

    def test_trailing_chunk_copied_verbatim(self, wav_file, tmp_path):
        src = tmp_path / "tail.wav"
        payload = b"INFOtest"
        raw = bytearray(wav_file.read_bytes())
        raw += b"LIST" + struct.pack("<I", len(payload)) + payload
        struct.pack_into("<I", raw, 4, len(raw) - 8)
        src.write_bytes(bytes(raw))
        out = tmp_path / "tail_out.wav"
        res = mute_wav(str(src), str(out), [TimeRange(0, 100)])
        assert res.ok
        assert out.read_bytes().endswith(b"LIST" + struct.pack("<I", len(payload)) + payload)
        assert len(out.read_bytes()) == len(raw)

    def test_no_ranges_copies_source(self, wav_file, tmp_path):
        out = tmp_path / "copy.wav"
        res = mute_wav(str(wav_file), str(out), [])
        assert res.ok and res.bytes_zeroed == 0
        assert out.read_bytes() == wav_file.read_bytes()

    def test_rejects_8_bit(self, tmp_path):
        src = tmp_path / "8bit.wav"
        with wave.open(str(src), "wb") as wf:
            wf.setnchannels(1)
            wf.setsampwidth(1)
            wf.setframerate(8000)
            wf.writeframes(b"\x80" * 800)
        res = mute_wav(str(src), str(tmp_path / "o.wav"), [TimeRange(0, 10)])
        assert not res.ok
        assert res.error.kind == "input_format"
        assert not (tmp_path / "o.wav").exists()

    def test_rejects_non_wav(self, tmp_path):
        src = tmp_path / "x.wav"
        src.write_bytes(b"not a wav file at all")
        res = mute_wav(str(src), str(tmp_path / "o.wav"), [])
        assert res.error.kind == "input_format"

    def test_missing_source(self, tmp_path):
        res = mute_wav(str(tmp_path / "none.wav"), str(tmp_path / "o.wav"), [])
        assert not res.ok

    def test_destination_must_differ(self, wav_file):
        res = mute_wav(str(wav_file), str(wav_file), [])
        assert not res.ok
        assert res.error.kind == "ValueError"

    def test_cancel_leaves_no_output(self, wav_file, tmp_path):
        out = tmp_path / "cancelled.wav"
        token = CancelToken()
        token.cancel()
        res = mute_wav(str(wav_file), str(out), [TimeRange(0, 100)], cancel=token)
        assert not res.ok
        assert res.error.kind == "cancelled"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["clip.wav"]
