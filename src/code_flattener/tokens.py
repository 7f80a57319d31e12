"""Approximate and tokenizer-based token counts for the flattened output."""

from __future__ import annotations

from functools import cache

import tiktoken

GPT4_ENCODING = "p50k_base"


@cache
def _encoding(name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(name)


def count_tokens(text: str, gpt4_tokens: bool = False) -> int:
    """
    Whitespace-separated word count by default. With `gpt4_tokens`, the exact
    count under the `p50k_base` tokenizer.
    """
    if gpt4_tokens:
        return len(_encoding(GPT4_ENCODING).encode(text, allowed_special="all"))
    return len(text.split())
