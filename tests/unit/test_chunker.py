"""Unit tests for the TextChunker (notekb.services.ingestion.chunker)."""

from __future__ import annotations

import pytest

from notekb.services.ingestion.chunker import DEFAULT_SEPARATORS, TextChunker
from notekb.utils.errors import ConfigurationError


def _reconstruct(segments: list[str], overlap: int) -> str:
    if not segments:
        return ""
    return segments[0] + "".join(s[overlap:] for s in segments[1:])


class TestConstruction:
    def test_defaults(self) -> None:
        chunker = TextChunker()
        assert chunker.chunk_size == 1000
        assert chunker.chunk_overlap == 200

    def test_overlap_equal_to_size_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(chunk_size=100, chunk_overlap=100)

    def test_overlap_larger_than_size_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(chunk_size=100, chunk_overlap=150)

    def test_non_positive_size_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(chunk_size=0, chunk_overlap=0)

    def test_negative_overlap_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(chunk_size=10, chunk_overlap=-1)

    def test_default_separators_end_with_character_boundary(self) -> None:
        assert DEFAULT_SEPARATORS[0] == "\n\n"
        assert DEFAULT_SEPARATORS[-1] == ""


class TestSplit:
    def test_sentence_boundaries_with_overlap(self) -> None:
        chunker = TextChunker(chunk_size=10, chunk_overlap=2)
        assert list(chunker.split("Alpha. Beta. Gamma.")) == [
            "Alpha.",
            "a. Beta.",
            "a. Gamma.",
        ]

    def test_short_text_is_single_segment(self) -> None:
        chunker = TextChunker(chunk_size=100, chunk_overlap=10)
        assert list(chunker.split("Just a short note.")) == ["Just a short note."]

    def test_empty_text_yields_nothing(self) -> None:
        assert list(TextChunker(chunk_size=10, chunk_overlap=2).split("")) == []

    def test_paragraph_break_preferred_over_space(self) -> None:
        chunker = TextChunker(chunk_size=12, chunk_overlap=0)
        assert list(chunker.split("one two\n\nthree four five")) == [
            "one two\n\n",
            "three four ",
            "five",
        ]

    def test_character_boundary_as_last_resort(self) -> None:
        chunker = TextChunker(chunk_size=4, chunk_overlap=1)
        assert list(chunker.split("abcdefghij")) == ["abcd", "defg", "ghij"]

    def test_cjk_sentence_punctuation(self) -> None:
        chunker = TextChunker(chunk_size=4, chunk_overlap=0)
        assert list(chunker.split("你好。世界。再见")) == ["你好。", "世界。", "再见"]

    def test_custom_separators(self) -> None:
        chunker = TextChunker(chunk_size=8, chunk_overlap=0, separators=["|"])
        assert list(chunker.split("aaa|bbb|ccc|ddd")) == ["aaa|bbb|", "ccc|ddd"]

    def test_segments_respect_size_budget(self) -> None:
        text = " ".join(f"word{i}" for i in range(300))
        chunker = TextChunker(chunk_size=50, chunk_overlap=10)
        segments = list(chunker.split(text))
        assert len(segments) > 1
        assert all(len(s) <= 50 for s in segments)

    def test_segments_overlap_exactly(self) -> None:
        text = "The quick brown fox jumps over the lazy dog. " * 20
        chunker = TextChunker(chunk_size=60, chunk_overlap=15)
        segments = list(chunker.split(text))
        for previous, current in zip(segments, segments[1:]):
            assert previous[-15:] == current[:15]

    def test_segments_reconstruct_original(self) -> None:
        text = "Line one.\nLine two is longer!\n\nA new paragraph? Yes. " * 15
        chunker = TextChunker(chunk_size=40, chunk_overlap=8)
        segments = list(chunker.split(text))
        assert _reconstruct(segments, 8) == text

    def test_split_is_lazy_and_restartable(self) -> None:
        chunker = TextChunker(chunk_size=10, chunk_overlap=2)
        text = "Alpha. Beta. Gamma."
        first = chunker.split(text)
        assert next(first) == "Alpha."
        assert list(chunker.split(text)) == list(chunker.split(text))

    def test_split_spans_match_split(self) -> None:
        chunker = TextChunker(chunk_size=10, chunk_overlap=2)
        text = "Alpha. Beta. Gamma."
        spans = list(chunker.split_spans(text))
        assert [text[s:e] for s, e in spans] == list(chunker.split(text))
        assert spans[0][0] == 0
        assert spans[-1][1] == len(text)


class TestChunkDocument:
    def test_every_chunk_gets_a_copy_of_metadata(self) -> None:
        chunker = TextChunker(chunk_size=10, chunk_overlap=2)
        metadata = {"page_id": "p1", "title": "Greek"}
        chunks = chunker.chunk_document("Alpha. Beta. Gamma.", metadata)

        assert len(chunks) == 3
        metadata["title"] = "changed"
        for chunk in chunks:
            assert chunk.metadata == {"page_id": "p1", "title": "Greek"}
            assert chunk.chunk_id is None
            assert chunk.embedding is None

    def test_empty_text_gives_no_chunks(self) -> None:
        assert TextChunker().chunk_document("", {"page_id": "p1"}) == []

    def test_whitespace_only_segments_skipped(self) -> None:
        chunker = TextChunker(chunk_size=5, chunk_overlap=0)
        chunks = chunker.chunk_document("abcd      \n\n     efgh", {})
        assert all(c.text.strip() for c in chunks)
        assert "".join(c.text for c in chunks).replace(" ", "").replace("\n", "") == "abcdefgh"
