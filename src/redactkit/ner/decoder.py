"""BIO label decoding.

Turns a `[token][label]` score matrix back into labeled character spans of
the original text. Spans come from the tokenizer's span map, so the decoder
never re-searches the text.

Rules (per token, skipping the special [CLS]/[SEP]/[PAD] tokens):
- B-X: close any open entity, open X at this token's span
- I-X with X == open type: extend the open entity's end
- anything else (O, type mismatch, token outside the text): close

Closing clamps to [0, len(text)] and drops zero-length results.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Optional
import json
import logging
import os

import numpy as np

from ..errors import ModelUnavailable
from ..pipeline.context import Entity, LabelTag, TagPrefix, TokenizedInput
from ..policies.loader import load_json

log = logging.getLogger("redactkit.ner.decoder")

_OUTSIDE = LabelTag(TagPrefix.OUTSIDE)

def load_label_map(path: str) -> Dict[int, str]:
    """Read `id2label` from a model config.json."""
    if not os.path.exists(path):
        raise ModelUnavailable(f"label config not found: {path}")
    try:
        cfg = load_json(path)
    except json.JSONDecodeError as e:
        raise ModelUnavailable(f"label config is not valid JSON: {path}: {e}") from e
    raw = cfg.get("id2label") if isinstance(cfg, dict) else None
    if not isinstance(raw, dict) or not raw:
        raise ModelUnavailable(f"label config has no id2label mapping: {path}")
    return {int(k): str(v) for k, v in raw.items()}

class LabelDecoder:

    def __init__(self, id2label: Mapping[int, str]):
        self.id2label = dict(id2label)
        self.num_labels = len(self.id2label)
        self._tags = {i: LabelTag.parse(lbl) for i, lbl in self.id2label.items()}

    @classmethod
    def from_config(cls, path: str) -> "LabelDecoder":
        id2label = load_label_map(path)
        log.info(f"ID-to-label mapping loaded. Total labels: {len(id2label)}")
        return cls(id2label)

    def tag_for(self, label_id: int) -> LabelTag:
        return self._tags.get(int(label_id), _OUTSIDE)

    def predictions(self, scores, n_tokens: int) -> np.ndarray:
        """Arg-max label id per token; ties go to the lowest label index."""
        arr = np.asarray(scores, dtype=np.float32)
        if arr.ndim == 3:
            arr = arr[0]
        if arr.ndim == 1:
            if arr.size % self.num_labels:
                raise ValueError(f"flat score array of size {arr.size} is not a multiple of {self.num_labels} labels")
            arr = arr.reshape(-1, self.num_labels)
        if arr.shape[-1] != self.num_labels:
            raise ValueError(f"score matrix has {arr.shape[-1]} columns, expected {self.num_labels}")
        return np.argmax(arr[:n_tokens], axis=1)

    def decode(self, tokenized: TokenizedInput, scores) -> List[Entity]:
        text = tokenized.text
        tokens = tokenized.tokens
        preds = self.predictions(scores, len(tokens))

        entities: List[Entity] = []
        open_type: Optional[str] = None
        start = end = -1

        def close() -> None:
            nonlocal open_type, start, end
            if open_type is not None:
                ent = _make_entity(text, open_type, start, end)
                if ent is not None:
                    entities.append(ent)
            open_type = None
            start = end = -1

        for i, tok in enumerate(tokens):
            if i >= len(preds):
                break
            if tok.is_special:
                continue
            if tok.span_start >= len(text):
                close()
                continue

            tag = self.tag_for(preds[i])
            if tag.prefix is TagPrefix.BEGIN:
                close()
                open_type = tag.type
                start, end = tok.span_start, tok.span_end
            elif tag.prefix is TagPrefix.INSIDE and open_type is not None and tag.type == open_type:
                end = tok.span_end
            else:
                close()

        close()
        return entities

def _make_entity(text: str, label: str, start: int, end: int) -> Optional[Entity]:
    s = max(0, min(start, len(text)))
    e = max(0, min(end, len(text)))
    if s >= e:
        return None
    return Entity(label=label, text=text[s:e], start=s, end=e)
