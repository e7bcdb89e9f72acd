"""Sequence-labeling model boundary.

The model is a black box: fixed-length (input_ids, attention_mask,
token_type_ids) int64 arrays in, a `[token][label]` score matrix out.
Training, selection and fine-tuning are out of scope.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
import logging
import os

import numpy as np

from ..errors import ModelUnavailable

log = logging.getLogger("redactkit.ner.labeler")

class SequenceLabeler(ABC):

    @abstractmethod
    def score(self, input_ids: np.ndarray, attention_mask: np.ndarray, token_type_ids: np.ndarray) -> np.ndarray:
        """Return a (seq_len, num_labels) score matrix for a batch of one."""
        raise NotImplementedError

class OnnxSequenceLabeler(SequenceLabeler):
    """ONNX Runtime session over an exported token-classification model."""

    def __init__(self, model_path: str, providers: Optional[List[str]] = None):
        if not os.path.exists(model_path):
            raise ModelUnavailable(f"model file not found: {model_path}")
        try:
            import onnxruntime as ort
        except ImportError as e:
            raise ModelUnavailable("onnxruntime is not installed (pip install 'redactkit[onnx]')") from e
        try:
            self.session = ort.InferenceSession(model_path, providers=providers or ["CPUExecutionProvider"])
        except Exception as e:
            raise ModelUnavailable(f"failed to create ONNX session for {model_path}: {e}") from e
        self.input_names = {i.name for i in self.session.get_inputs()}
        log.info(f"ONNX session created: {model_path} inputs={sorted(self.input_names)}")

    def score(self, input_ids: np.ndarray, attention_mask: np.ndarray, token_type_ids: np.ndarray) -> np.ndarray:
        feeds = {
            "input_ids": input_ids,
            "attention_mask": attention_mask,
            "token_type_ids": token_type_ids,
        }
        feeds = {k: v for k, v in feeds.items() if k in self.input_names}
        try:
            outputs = self.session.run(None, feeds)
        except Exception as e:
            raise ModelUnavailable(f"ONNX inference failed: {e}") from e
        logits = np.asarray(outputs[0])
        return logits[0] if logits.ndim == 3 else logits
