"""WordPiece tokenizer with character-offset tracking.

Algorithm:
1) split the text on whitespace
2) locate each word in the original text, searching case-insensitively from
   the previous word's end (never before it, so repeated substrings map to
   the right occurrence)
3) greedy longest-match against the vocabulary; continuation pieces carry
   the `##` marker; if no prefix is known the rest of the word becomes a
   single [UNK]
4) wrap with [CLS] (0, 0) and [SEP] (len, len)

Each sub-token span is walked forward from its word's verified start, so
spans are in original-text coordinates and never overlap.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Tuple
import logging
import os
import re

from ..errors import ModelUnavailable
from ..pipeline.context import (
    CLS_TOKEN, SEP_TOKEN, UNK_TOKEN, PAD_TOKEN, Token, TokenizedInput,
)
from .tokenizer import TokenizerAdapter, TokenizerInfo

log = logging.getLogger("redactkit.tokenizer")

DEFAULT_IDS = {PAD_TOKEN: 0, UNK_TOKEN: 100, CLS_TOKEN: 101, SEP_TOKEN: 102}

def load_vocab(path: str) -> Dict[str, int]:
    """One token per line; id is the index among non-empty lines."""
    if not os.path.exists(path):
        raise ModelUnavailable(f"vocabulary file not found: {path}")
    vocab: Dict[str, int] = {}
    idx = 0
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            tok = line.strip()
            if not tok:
                continue
            vocab[tok] = idx
            idx += 1
    return vocab

class WordPieceTokenizer(TokenizerAdapter):

    def __init__(
        self,
        vocab: Mapping[str, int],
        *,
        max_tokens: int = 512,
        lowercase: bool = True,
        continuation: str = "##",
        name: str = "wordpiece",
    ):
        if max_tokens < 2:
            raise ValueError("max_tokens must leave room for [CLS] and [SEP]")
        self.vocab = dict(vocab)
        self.max_tokens = int(max_tokens)
        self.lowercase = lowercase
        self.continuation = continuation
        self.info = TokenizerInfo(name=name, vocab_size=len(self.vocab), type="wordpiece", max_context=self.max_tokens)

    @classmethod
    def from_vocab_file(cls, path: str, **kwargs) -> "WordPieceTokenizer":
        vocab = load_vocab(path)
        log.info(f"Vocab loaded from {path}. Size: {len(vocab)}")
        return cls(vocab, **kwargs)

    def token_id(self, surface: str) -> int:
        if surface in self.vocab:
            return self.vocab[surface]
        if surface in DEFAULT_IDS and surface != UNK_TOKEN:
            return DEFAULT_IDS[surface]
        return self.vocab.get(UNK_TOKEN, DEFAULT_IDS[UNK_TOKEN])

    @property
    def pad_id(self) -> int:
        return self.token_id(PAD_TOKEN)

    def split_word(self, word: str) -> List[Tuple[str, int]]:
        """Longest-match split of one word -> [(piece, chars covered)]."""
        key = word
        if self.lowercase:
            lowered = word.lower()
            # lower() may change length for a few code points; spans need 1:1 chars
            if len(lowered) == len(word):
                key = lowered

        pieces: List[Tuple[str, int]] = []
        start = 0
        while start < len(key):
            end = len(key)
            found = None
            while start < end:
                sub = key[start:end]
                if start > 0:
                    sub = self.continuation + sub
                if sub in self.vocab:
                    found = sub
                    break
                end -= 1
            if found is None:
                pieces.append((UNK_TOKEN, len(key) - start))
                break
            pieces.append((found, end - start))
            start = end
        return pieces

    def tokenize(self, text: str) -> TokenizedInput:
        body: List[Token] = []
        cursor = 0
        for word in text.split():
            m = re.compile(re.escape(word), re.IGNORECASE).search(text, cursor)
            if m is None:
                log.warning(f"Could not locate word at or after offset {cursor}; skipping rest of text")
                cursor = len(text)
                continue
            pos = m.start()
            for piece, n in self.split_word(word):
                body.append(Token(piece, self.token_id(piece), pos, pos + n))
                pos += n
            cursor = m.end()

        budget = self.max_tokens - 2
        if len(body) > budget:
            log.debug(f"Truncating {len(body)} tokens to {budget}")
            body = body[:budget]

        n = len(text)
        tokens = [Token(CLS_TOKEN, self.token_id(CLS_TOKEN), 0, 0)]
        tokens.extend(body)
        tokens.append(Token(SEP_TOKEN, self.token_id(SEP_TOKEN), n, n))
        return TokenizedInput(text=text, tokens=tuple(tokens))
