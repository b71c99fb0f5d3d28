from __future__ import annotations

import math

import pytest

from correios_hub.integrations.correios.chunking import chunked, fetch_in_chunks, merge_in_order


@pytest.mark.parametrize("n", [0, 1, 4, 5, 6, 10, 12, 23])
def test_chunked_sizes_and_order(n):
    items = list(range(n))
    groups = list(chunked(items, 5))

    assert len(groups) == math.ceil(n / 5)
    assert all(len(g) == 5 for g in groups[:-1])
    if groups:
        assert 1 <= len(groups[-1]) <= 5
    assert [x for g in groups for x in g] == items


def test_chunked_accepts_custom_size_and_rejects_zero():
    assert list(chunked("abcde", 2)) == [["a", "b"], ["c", "d"], ["e"]]
    with pytest.raises(ValueError):
        list(chunked([1, 2], 0))


def test_merge_in_order_keeps_inter_and_intra_chunk_order():
    assert merge_in_order([["a1", "a2"], [], ["b1"], ["c1", "c2", "c3"]]) == ["a1", "a2", "b1", "c1", "c2", "c3"]
    assert merge_in_order([]) == []


def test_fetch_in_chunks_calls_sequentially():
    seen = []

    def fetch(chunk):
        seen.append(list(chunk))
        return [x * 10 for x in chunk]

    assert fetch_in_chunks(list(range(7)), fetch, 3) == [0, 10, 20, 30, 40, 50, 60]
    assert seen == [[0, 1, 2], [3, 4, 5], [6]]


# first failing chunk aborts; remaining chunks are never attempted
def test_fetch_in_chunks_aborts_on_first_failure():
    seen = []

    def fetch(chunk):
        seen.append(chunk)
        if len(seen) == 2:
            raise RuntimeError("chunk 2 failed")
        return chunk

    with pytest.raises(RuntimeError):
        fetch_in_chunks(list(range(12)), fetch, 5)

    assert len(seen) == 2
