"""Tokenizer adapter plugin.

The entity recognizer only needs two things from a tokenizer:
- encode(text) -> list[int]  (model input ids)
- tokenize(text) -> TokenizedInput  (ids *and* character spans into text)

Spans are what let decoder output land back on the original string, so any
adapter used for redaction must implement `tokenize`.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from ..pipeline.context import TokenizedInput

@dataclass(frozen=True)
class TokenizerInfo:
    name: str
    vocab_size: int
    type: str  # wordpiece | bpe | unigram
    max_context: int

class TokenizerAdapter(ABC):
    """Base tokenizer adapter."""
    info: TokenizerInfo

    @abstractmethod
    def tokenize(self, text: str) -> TokenizedInput:
        """Split text into sub-tokens with character spans."""
        raise NotImplementedError

    def encode(self, text: str) -> List[int]:
        """Tokenize a string into token IDs."""
        return self.tokenize(text).input_ids

    def encode_batch(self, texts: Sequence[str]) -> List[List[int]]:
        """Optional fast path; default falls back to single encode."""
        return [self.encode(t) for t in texts]
