"""Redaction pipeline.

One pipeline instance holds read-only collaborators (entity recognizer,
regex rules, region rules, policy), built once and injected at
construction. Every call is independent:

    text  -> tokenize -> decode + match -> fuse -> redact
    audio -> transcript -> detect -> project to time -> mute WAV
    image -> recognized words -> regions -> blur

Calls never raise for bad input, missing models or cancellation; they
return a failure result (`ok=False`, `error.kind`) instead.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence
import logging
import os

# Import PII module to trigger auto-registration of detectors
import redactkit.pii  # noqa: F401
from ..audio.projector import project, transcript_text
from ..audio.transcript import Transcriber
from ..audio.wav import mute_wav
from ..errors import RedactKitError
from ..image.recognizer import TextRecognizer
from ..image.redactor import load_image, redact_image, save_image
from ..image.regions import RegionRule
from ..ner.recognizer import EntityRecognizer
from ..pii.fusion import fuse
from ..pii.matcher import match
from ..pii.redact import redact_text
from ..pii.registry import default_rules
from ..policies.policy import RedactionPolicy
from .context import CancelToken, Entity, PiiRegexRule, RecognizedWord, TimedWord, check_cancel
from .results import AudioResult, ImageResult, TextResult, failure

log = logging.getLogger("redactkit.pipeline")

NOTHING_TO_MUTE = "no PII found in the transcript; output is an unmodified copy"

class RedactionPipeline:

    def __init__(
        self,
        recognizer: Optional[EntityRecognizer] = None,
        rules: Optional[Sequence[PiiRegexRule]] = None,
        policy: Optional[RedactionPolicy] = None,
        region_rules: Optional[Iterable[RegionRule]] = None,
    ):
        self.policy = policy or RedactionPolicy()
        self.recognizer = recognizer
        if rules is None:
            rules = default_rules(self.policy.detectors) + list(self.policy.extra_rules)
        self.rules = tuple(rules)
        self.region_rules = None if region_rules is None else tuple(region_rules)
        log.info(
            f"Pipeline ready: ner={'on' if recognizer else 'off'} rules={len(self.rules)} "
            f"mode={self.policy.mode} overlap={self.policy.overlap}"
        )

    @classmethod
    def from_policy(cls, policy: RedactionPolicy) -> "RedactionPipeline":
        """Build from a policy; loads the NER model when `model_dir` is set."""
        recognizer = None
        if policy.model_dir:
            recognizer = EntityRecognizer.from_model_dir(policy.model_dir, max_length=policy.max_tokens)
        return cls(recognizer=recognizer, policy=policy)

    # --- text -------------------------------------------------------------

    def detect(self, text: str) -> List[Entity]:
        decoded = self.recognizer.recognize(text) if self.recognizer is not None else []
        matched = match(text, self.rules)
        selected = self.policy.selects
        entities = fuse(
            [e for e in decoded if selected(e)],
            [e for e in matched if selected(e)],
            overlap=self.policy.overlap,
        )
        log.debug(f"detect: ner={len(decoded)} patterns={len(matched)} fused={len(entities)}")
        return entities

    def redact_text(self, text: str) -> TextResult:
        try:
            entities = self.detect(text)
            redacted = redact_text(text, entities, mode=self.policy.mode, mask_char=self.policy.mask_char)
        except RedactKitError as e:
            log.error(f"Text redaction failed: {e}")
            return failure(TextResult, e)
        log.info(f"Redacted {len(entities)} entities from text of length {len(text)}")
        return TextResult(text=redacted, entities=entities)

    # --- audio ------------------------------------------------------------

    def redact_audio(
        self,
        words: Sequence[TimedWord],
        src_wav: str,
        dst_wav: str,
        cancel: Optional[CancelToken] = None,
    ) -> AudioResult:
        """Mute the PII in `src_wav` given its timed transcript.

        `transcript` in the result is the redacted transcript text.
        """
        try:
            check_cancel(cancel)
            transcript = transcript_text(words)
            entities = self.detect(transcript)
            ranges = project(words, entities)
            redacted = redact_text(transcript, entities, mode=self.policy.mode, mask_char=self.policy.mask_char)
        except RedactKitError as e:
            log.error(f"Audio redaction failed before muting: {e}")
            return failure(AudioResult, e)

        muted = mute_wav(src_wav, dst_wav, ranges, cancel=cancel)
        if not muted.ok:
            return AudioResult(
                ok=False, error=muted.error, message=muted.message,
                transcript=redacted, entities=entities, ranges=muted.ranges,
            )
        message = "" if muted.ranges else NOTHING_TO_MUTE
        if message:
            log.warning(message)
        return AudioResult(
            transcript=redacted,
            entities=entities,
            ranges=muted.ranges,
            output_path=muted.output_path,
            muted=bool(muted.ranges),
            message=message,
        )

    def redact_audio_file(
        self,
        transcriber: Transcriber,
        src_wav: str,
        dst_wav: str,
        cancel: Optional[CancelToken] = None,
    ) -> AudioResult:
        try:
            words = transcriber.transcribe(src_wav, cancel)
        except (RedactKitError, OSError) as e:
            log.error(f"Transcription failed for {src_wav}: {e}")
            return failure(AudioResult, e)
        return self.redact_audio(words, src_wav, dst_wav, cancel)

    # --- image ------------------------------------------------------------

    def redact_image(self, words: Sequence[RecognizedWord], image, cancel: Optional[CancelToken] = None) -> ImageResult:
        try:
            out = redact_image(words, image, radius=self.policy.blur_radius, rules=self.region_rules, cancel=cancel)
        except RedactKitError as e:
            log.error(f"Image redaction failed: {e}")
            return failure(ImageResult, e)
        return ImageResult(image=out.image, regions=out.regions)

    def redact_image_file(
        self,
        recognizer: TextRecognizer,
        src_path: str,
        dst_path: str,
        cancel: Optional[CancelToken] = None,
    ) -> ImageResult:
        try:
            image = load_image(src_path)
            words = recognizer.recognize(image)
        except (RedactKitError, OSError) as e:
            log.error(f"Could not read text from {src_path}: {e}")
            return failure(ImageResult, e)
        result = self.redact_image(words, image, cancel)
        if not result.ok:
            return result
        try:
            os.makedirs(os.path.dirname(os.path.abspath(dst_path)), exist_ok=True)
            save_image(result.image, dst_path)
        except OSError as e:
            log.error(f"Could not write {dst_path}: {e}")
            return failure(ImageResult, e)
        log.info(f"Image redacted: regions={len(result.regions)} output={dst_path}")
        return result
