"""Tests for output block formatting and the shared aggregator."""

from __future__ import annotations

import threading
from pathlib import Path

from code_flattener.aggregator import Aggregator, format_block


def test_plain_block():
    assert format_block(Path("/r/a.py"), "print()", "py", markdown=False) == (
        "\n\n# --- File: /r/a.py ---\n\nprint()"
    )


def test_markdown_block():
    assert format_block(Path("/r/a.py"), "print()", "py", markdown=True) == (
        "\n\n```py\n# --- File: /r/a.py ---\nprint()\n```\n"
    )


def test_aggregator_appends_in_order():
    agg = Aggregator()
    agg.add(Path("a"), "A", "")
    agg.add(Path("b"), "B", "")
    assert agg.content == "\n\n# --- File: a ---\n\nA\n\n# --- File: b ---\n\nB"
    assert agg.file_count == 2
    assert agg.processed_paths == [Path("a"), Path("b")]


def test_record_counts_without_content():
    agg = Aggregator()
    agg.record(Path("a"))
    assert agg.content == ""
    assert agg.file_count == 1


def test_concurrent_adds_lose_nothing():
    agg = Aggregator()

    def worker(start: int) -> None:
        for i in range(start, start + 100):
            agg.add(Path(f"f{i}"), str(i), "txt")

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert agg.file_count == 800
    assert len(set(agg.processed_paths)) == 800
