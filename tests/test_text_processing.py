"""
Unit tests for text processing: clean_text and split_chunks.
"""

import pytest

from jarvis.services.text_processing import Chunk, clean_text, split_chunks


class TestCleanText:
    """clean_text() is applied to each extracted PDF page before chunking."""

    def test_blank_page_is_empty(self) -> None:
        assert clean_text("") == ""
        assert clean_text(" \n\t\n ") == ""

    def test_running_header_repeated_by_extraction_is_kept_once(self) -> None:
        page = "ACME X200 User Manual\nACME X200 User Manual\nSetup is easy."
        assert clean_text(page) == "ACME X200 User Manual\nSetup is easy."

    def test_repeat_after_other_text_is_kept(self) -> None:
        page = "Note.\nCharge before use.\nNote."
        assert clean_text(page) == page

    def test_indentation_and_trailing_spaces_are_trimmed(self) -> None:
        assert clean_text("   Warranty terms.   \n\tSee page 4.  ") == "Warranty terms.\nSee page 4."

    def test_runs_of_blank_lines_become_one(self) -> None:
        assert clean_text("Intro.\n\n\n\nDetails.") == "Intro.\n\nDetails."

    def test_ligatures_are_unfolded(self) -> None:
        # pypdf often returns the single "fi" ligature code point
        assert clean_text("Conﬁgure the ﬁlter.") == "Configure the filter."


class TestSplitChunks:
    """Tests for split_chunks()."""

    def test_empty_returns_empty_list(self) -> None:
        assert split_chunks("") == []

    def test_three_sentences(self) -> None:
        chunks = split_chunks("Hi. Ok? Go!")
        assert [c.text for c in chunks] == ["Hi.", "Ok?", "Go!"]

    def test_offsets_start_after_the_terminal(self) -> None:
        assert split_chunks("Hi. Ok? Go!") == [
            Chunk(offset=0, text="Hi."),
            Chunk(offset=3, text="Ok?"),
            Chunk(offset=7, text="Go!"),
        ]

    def test_no_terminal_punctuation_is_one_chunk(self) -> None:
        assert split_chunks("no punctuation here") == [Chunk(offset=0, text="no punctuation here")]

    def test_trailing_fragment_is_kept(self) -> None:
        chunks = split_chunks("Version 1.5 is out. Next")
        assert chunks == [
            Chunk(offset=0, text="Version 1.5 is out."),
            Chunk(offset=19, text="Next"),
        ]

    def test_terminal_without_following_whitespace_is_not_a_boundary(self) -> None:
        assert [c.text for c in split_chunks("See e.g.the list.")] == ["See e.g.the list."]

    @pytest.mark.parametrize("separator", [" ", "\n", "\t"])
    def test_any_whitespace_ends_a_sentence(self, separator: str) -> None:
        assert [c.text for c in split_chunks(f"One.{separator}Two.")] == ["One.", "Two."]

    def test_chunks_are_ordered_and_reconstruct_the_text(self) -> None:
        text = "First sentence.  Second one!\nThird? And a tail"
        chunks = split_chunks(text)
        offsets = [c.offset for c in chunks]
        assert offsets == sorted(offsets)
        assert " ".join(c.text for c in chunks) == " ".join(text.split())

    def test_chunk_count_matches_terminators_plus_tail(self) -> None:
        text = "A. B! C? tail"
        assert len(split_chunks(text)) == 3 + 1
