"""CLI entrypoint.

Commands:
- `redactkit text  [TEXT] [--input file.txt] [--output out.txt]`
- `redactkit audio --input in.wav --output out.wav (--transcript words.txt | --vosk-model DIR)`
- `redactkit image --input photo.png|folder --output out.png|folder [--lang eng]`
- `redactkit rules` : list detectors and their regex rules
- `redactkit --report-dir reports report` : print run aggregates

Common options: `--policy configs/policy.yaml`, `--log-dir`, `--run-id`,
`--report-dir` (Parquet run report + manifest). Exit code is 1 when any
call fails, 2 when the pipeline cannot be built.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from tqdm import tqdm

from .analytics.schemas import make_event
from .analytics.sink import AnalyticsSink
from .errors import RedactKitError
from .logging_ import setup_logging
from .pipeline.build import RedactionPipeline
from .pipeline.state import Loading, PipelineEvent, advance, settle
from .policies.policy import RedactionPolicy
from .run_id import resolve_run_id
from .storage.writer import append_jsonl, atomic_output, write_manifest

log = logging.getLogger("redactkit.cli")

def _load_policy(path: Optional[str]) -> RedactionPolicy:
    return RedactionPolicy.from_yaml(path) if path else RedactionPolicy()

def _read_text(args) -> str:
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            return f.read()
    if args.text is not None:
        return args.text
    return sys.stdin.read()

class _Reporter:
    """Per-call analytics events + a manifest, when --report-dir is given."""

    def __init__(self, report_dir: Optional[str], run_id: str, command: str, policy_path: Optional[str]):
        self.run_id = run_id
        self.command = command
        self.report_dir = report_dir
        self.sink = AnalyticsSink(report_dir, run_id) if report_dir else None
        self.started_ms = int(time.time() * 1000)
        self.policy_path = os.path.abspath(policy_path) if policy_path else None
        self.calls = 0
        self.failures = 0

    def record(self, modality: str, source: str, result, started: float) -> None:
        self.calls += 1
        self.failures += 0 if result.ok else 1
        if self.sink is None:
            return
        duration_ms = (time.perf_counter() - started) * 1000.0
        event = make_event(run_id=self.run_id, modality=modality, source=source, result=result, duration_ms=duration_ms)
        append_jsonl(os.path.join(self.report_dir, "audit", f"{self.run_id}.jsonl"), [{
            "source": source,
            "ok": event["ok"],
            "error_kind": event["error_kind"],
            "labels": dict(event["label_counts"]),
        }])
        self.sink.emit(event)

    def close(self) -> None:
        if self.sink is None:
            return
        self.sink.flush_aggregates()
        write_manifest(os.path.join(self.report_dir, "manifests", f"{self.run_id}.json"), {
            "run_id": self.run_id,
            "command": self.command,
            "policy": self.policy_path,
            "start_time_ms": self.started_ms,
            "end_time_ms": int(time.time() * 1000),
            "calls": self.calls,
            "failures": self.failures,
        })

def _cmd_text(pipeline: RedactionPipeline, args, reporter: _Reporter) -> int:
    text = _read_text(args)
    started = time.perf_counter()
    result = pipeline.redact_text(text)
    reporter.record("text", args.input or "<inline>", result, started)
    if not result.ok:
        log.error(f"Text redaction failed: {result.message}")
        return 1
    if args.output:
        with atomic_output(args.output, mode="w") as f:
            f.write(result.text)
    else:
        sys.stdout.write(result.text)
        if not result.text.endswith("\n"):
            sys.stdout.write("\n")
    return 0

def _cmd_audio(pipeline: RedactionPipeline, args, reporter: _Reporter) -> int:
    from .audio.transcript import VoskTranscriber, parse_timestamped_transcript

    started = time.perf_counter()
    if args.transcript:
        with open(args.transcript, "r", encoding="utf-8") as f:
            words = parse_timestamped_transcript(f.read())
        result = pipeline.redact_audio(words, args.input, args.output)
    else:
        try:
            transcriber = VoskTranscriber(args.vosk_model)
        except RedactKitError as e:
            log.error(f"Cannot load speech model: {e}")
            return 2
        result = pipeline.redact_audio_file(transcriber, args.input, args.output)
    reporter.record("audio", args.input, result, started)
    if not result.ok:
        log.error(f"Audio redaction failed: {result.message}")
        return 1
    if result.message:
        log.warning(result.message)
    log.info(f"Muted {len(result.ranges)} ranges -> {result.output_path}")
    print(result.transcript)
    return 0

def _image_jobs(src: str, dst: str) -> List[tuple]:
    from .image.redactor import iter_images

    if not os.path.isdir(src):
        return [(src, dst)]
    return [(p, os.path.join(dst, os.path.relpath(p, src))) for p in iter_images(src)]

def _cmd_image(pipeline: RedactionPipeline, args, reporter: _Reporter) -> int:
    from .image.recognizer import TesseractRecognizer

    try:
        recognizer = TesseractRecognizer(lang=args.lang, min_confidence=pipeline.policy.confidence_threshold)
    except RedactKitError as e:
        log.error(f"Cannot load text recognizer: {e}")
        return 2

    jobs = _image_jobs(args.input, args.output)
    log.info(f"Redacting {len(jobs)} image(s) from {args.input}")
    state = advance(Loading(), PipelineEvent.LOADED)
    failed = 0
    for src, dst in tqdm(jobs, desc="images", unit="img", disable=len(jobs) < 2):
        state = advance(state, PipelineEvent.START, item=src)
        started = time.perf_counter()
        result = pipeline.redact_image_file(recognizer, src, dst)
        reporter.record("image", src, result, started)
        state = settle(state, result)
        if not result.ok:
            failed += 1
            log.error(f"{src}: {state.message}")
    log.info(f"Images done: {len(jobs) - failed} ok, {failed} failed")
    return 1 if failed else 0

def _cmd_report(args) -> int:
    from .analytics.sink import read_aggregates

    if not args.report_dir:
        log.error("report needs --report-dir")
        return 2
    rows = read_aggregates(args.report_dir)
    if not rows:
        print(f"No aggregates under {args.report_dir}")
        return 0
    cols = ["run_id", "date", "modality", "calls", "failures", "entities", "ranges_muted", "regions_blurred", "duration_ms_p50", "duration_ms_p90"]
    print("\t".join(cols))
    for row in rows:
        print("\t".join("" if row.get(c) is None else str(row.get(c)) for c in cols))
    return 0

def _cmd_rules(pipeline: RedactionPipeline, args) -> int:
    from .pii.registry import list_detectors

    print("detectors: " + ", ".join(list_detectors()))
    for rule in pipeline.rules:
        print(f"{rule.label}\t{rule.pattern}")
    return 0

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="redactkit")
    p.add_argument("--policy", default=None, help="Redaction policy YAML")
    p.add_argument("--log-dir", default=None)
    p.add_argument("--log-level", default="INFO")
    p.add_argument("--run-id", default=None)
    p.add_argument("--report-dir", default=None, help="Write Parquet analytics and a manifest here")
    sub = p.add_subparsers(dest="cmd", required=True)

    pt = sub.add_parser("text")
    pt.add_argument("text", nargs="?", default=None, help="Text to redact (default: --input or stdin)")
    pt.add_argument("--input", default=None)
    pt.add_argument("--output", default=None)

    pw = sub.add_parser("audio")
    pw.add_argument("--input", required=True, help="16-bit PCM WAV")
    pw.add_argument("--output", required=True)
    src = pw.add_mutually_exclusive_group(required=True)
    src.add_argument("--transcript", help='Timed transcript: "word [0.00-0.20] word [0.20-0.40] ..."')
    src.add_argument("--vosk-model", help="Vosk model directory (needs the audio extra)")

    pi = sub.add_parser("image")
    pi.add_argument("--input", required=True, help="Image file or folder")
    pi.add_argument("--output", required=True, help="Output file or folder")
    pi.add_argument("--lang", default="eng", help="Tesseract language(s)")

    sub.add_parser("rules")
    sub.add_parser("report", help="Print run aggregates from --report-dir")
    return p

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    run_id = resolve_run_id(args.run_id, prefix=args.cmd)
    setup_logging(args.log_dir, run_id, args.log_level)

    if args.cmd == "report":
        return _cmd_report(args)

    try:
        policy = _load_policy(args.policy)
        pipeline = RedactionPipeline.from_policy(policy)
    except (RedactKitError, ValueError, OSError) as e:
        log.error(f"Could not build pipeline: {e}")
        return 2

    if args.cmd == "rules":
        return _cmd_rules(pipeline, args)

    reporter = _Reporter(args.report_dir, run_id, args.cmd, args.policy)
    try:
        if args.cmd == "text":
            return _cmd_text(pipeline, args, reporter)
        if args.cmd == "audio":
            return _cmd_audio(pipeline, args, reporter)
        return _cmd_image(pipeline, args, reporter)
    except OSError as e:
        log.error(f"I/O error: {e}")
        return 1
    finally:
        reporter.close()

if __name__ == "__main__":
    sys.exit(main())
