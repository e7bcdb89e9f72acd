"""Entity recognizer: tokenize -> score -> decode for one text.

Collaborators are injected once and treated as read-only afterwards, so a
single recognizer can serve many calls.
"""

from __future__ import annotations
from typing import List, Optional
import logging
import os

from ..errors import ModelUnavailable, RedactKitError
from ..pipeline.context import Entity
from ..plugins.wordpiece import WordPieceTokenizer
from .decoder import LabelDecoder
from .labeler import OnnxSequenceLabeler, SequenceLabeler

log = logging.getLogger("redactkit.ner")

class EntityRecognizer:

    def __init__(
        self,
        tokenizer: WordPieceTokenizer,
        labeler: SequenceLabeler,
        decoder: LabelDecoder,
        max_length: Optional[int] = None,
    ):
        self.tokenizer = tokenizer
        self.labeler = labeler
        self.decoder = decoder
        self.max_length = int(max_length or tokenizer.max_tokens)

    @classmethod
    def from_model_dir(
        cls,
        model_dir: str,
        *,
        model_file: str = "model.onnx",
        max_length: int = 512,
        lowercase: bool = True,
    ) -> "EntityRecognizer":
        """Load vocab.txt, config.json and an ONNX model from one directory."""
        tokenizer = WordPieceTokenizer.from_vocab_file(
            os.path.join(model_dir, "vocab.txt"), max_tokens=max_length, lowercase=lowercase,
        )
        decoder = LabelDecoder.from_config(os.path.join(model_dir, "config.json"))
        labeler = OnnxSequenceLabeler(os.path.join(model_dir, model_file))
        return cls(tokenizer, labeler, decoder, max_length=max_length)

    def recognize(self, text: str) -> List[Entity]:
        tokenized = self.tokenizer.tokenize(text)
        inputs = tokenized.to_model_inputs(self.max_length, pad_id=self.tokenizer.pad_id)
        try:
            scores = self.labeler.score(**inputs)
        except RedactKitError:
            raise
        except Exception as e:
            raise ModelUnavailable(f"labeling model failed: {type(e).__name__}: {e}") from e
        try:
            entities = self.decoder.decode(tokenized, scores)
        except ValueError as e:
            raise ModelUnavailable(f"model output does not match the label map: {e}") from e
        log.debug(f"NER found {len(entities)} entities over {len(tokenized)} tokens")
        return entities
