"""Sequence-labeling (NER) side of detection."""

from .decoder import LabelDecoder, load_label_map
from .labeler import SequenceLabeler, OnnxSequenceLabeler
from .recognizer import EntityRecognizer

__all__ = [
    "LabelDecoder",
    "load_label_map",
    "SequenceLabeler",
    "OnnxSequenceLabeler",
    "EntityRecognizer",
]
