"""
Tests for text cleaning, chunking and chunk quality checks.
"""

import pytest

from ragbot.errors import InputError
from ragbot.text_processing import chunk_text, has_meaningful_content, normalize_text

from conftest import SENTENCE

TWENTY_WORDS = (
    "The committee reviewed the quarterly budget and agreed to fund three new "
    "community projects in the coming fiscal year starting next spring"
)


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_page_number_and_blank_lines(self):
        """Test the page header is dropped and a paragraph break survives."""
        raw = "Page 12\n\nHello   world.\n\n\n\nBye."
        assert normalize_text(raw) == "Hello world.\n\nBye."

    def test_page_fraction_removed(self):
        assert normalize_text("Results are final 3 / 10 for now.") == "Results are final for now."

    def test_uppercase_running_header_removed(self):
        assert normalize_text("ANNUAL FINANCIAL REPORT\nRevenue grew.") == "Revenue grew."

    def test_two_uppercase_words_kept(self):
        """Test that short acronym pairs are not mistaken for headers."""
        assert normalize_text("The NASA JPL team met.") == "The NASA JPL team met."

    def test_header_date_removed(self):
        raw = "12 JAN 2024\nRevenue grew by ten percent."
        assert normalize_text(raw) == "Revenue grew by ten percent."

    def test_date_in_sentence_kept(self):
        text = "The contract was signed on 5 March 2021 by both parties."
        assert normalize_text(text) == text

    def test_bullets_stripped(self):
        assert normalize_text("• first\n- second\n* third") == "first second third"

    def test_numbered_list_markers_stripped(self):
        assert normalize_text("1. Intro\n2. Body") == "Intro Body"

    def test_decimal_numbers_kept(self):
        assert normalize_text("3.14 is close to pi") == "3.14 is close to pi"

    def test_wrapped_year_kept(self):
        """Test a line that starts with a sentence-ending year is not a list item."""
        raw = "The company was founded in\n1998. It now has offices worldwide."
        assert normalize_text(raw) == "The company was founded in 1998. It now has offices worldwide."

    def test_line_break_variants(self):
        """Test CRLF and CR both count as line breaks."""
        assert normalize_text("one\r\n\r\ntwo\rthree") == "one\n\ntwo three"

    def test_single_newlines_joined(self):
        assert normalize_text("a line that\nwraps here") == "a line that wraps here"

    def test_paragraph_break_with_spaces(self):
        assert normalize_text("first  \n   \n  second") == "first\n\nsecond"

    @pytest.mark.parametrize("raw", ["", "   ", "\n\n\n", "Page 3"])
    def test_empty_results(self, raw):
        assert normalize_text(raw) == ""


class TestHasMeaningfulContent:
    """Tests for has_meaningful_content."""

    def test_rejects_digits_and_punctuation(self):
        assert not has_meaningful_content("12 34 56 78, 90; 11 - 22 (33) 44 55 66 77 88 99 ... !!")

    def test_accepts_ordinary_sentence(self):
        assert has_meaningful_content(TWENTY_WORDS)

    def test_requires_eight_words(self):
        assert not has_meaningful_content("Seven words are not quite enough here")
        assert has_meaningful_content("Eight words are just about enough for this")

    def test_rejects_mostly_numbers(self):
        """Test that 8 words lost among 30 numbers fail the ratio check."""
        numbers = " ".join(str(n) for n in range(100, 130))
        chunk = f"Quarterly revenue table for every regional sales office {numbers}"
        assert not has_meaningful_content(chunk)

    def test_single_characters_ignored(self):
        assert not has_meaningful_content("a b c d e f g h i j k l m n o p")

    def test_page_artifacts_do_not_count(self):
        assert not has_meaningful_content("Page 1 Page 2 Page 3 Page 4 Page 5 Page 6 Page 7 Page 8")

    def test_symbols_stripped_before_counting(self):
        assert has_meaningful_content("★ Customers ★ really ★ love ★ our ★ fast ★ friendly ★ delivery ★ service ★")


class TestChunkText:
    """Tests for chunk_text."""

    def test_plain_passage_gives_three_overlapping_chunks(self, plain_passage):
        chunks = chunk_text(plain_passage)

        assert len(chunks) == 3
        assert all(len(c) <= 800 for c in chunks)
        # neighbours share text from the overlap window
        assert chunks[0][-50:] in chunks[1]
        assert chunks[1][-50:] in chunks[2]

    def test_breaks_after_sentence_end(self, plain_passage):
        chunks = chunk_text(plain_passage)
        assert chunks[0].endswith("village.")
        assert len(chunks[0]) == 611

    def test_prefers_paragraph_break(self):
        paragraph = " ".join([SENTENCE] * 13)
        text = paragraph + "\n\n" + paragraph

        chunks = chunk_text(text)

        assert chunks[0] == paragraph

    def test_breaks_after_newline(self):
        line = ("lorem ipsum dolor sit amet " * 25).strip()
        text = line + "\n" + line

        chunks = chunk_text(text)

        assert chunks[0] == line

    def test_hard_cut_without_boundaries(self):
        text = "word " * 300
        chunks = chunk_text(text)
        assert len(chunks[0]) <= 600

    def test_short_text_single_chunk(self):
        assert chunk_text(TWENTY_WORDS) == [TWENTY_WORDS]

    def test_tiny_text_dropped(self):
        assert chunk_text("Too short to be a useful retrieval unit at all.") == []

    def test_empty_text(self):
        assert chunk_text("") == []

    def test_numbers_are_filtered(self, numbers_table):
        assert chunk_text(normalize_text(numbers_table)) == []

    @pytest.mark.parametrize("target_size,overlap", [(100, 100), (100, 150), (50, 500)])
    def test_terminates_when_overlap_not_smaller(self, plain_passage, target_size, overlap):
        chunks = chunk_text(plain_passage, target_size=target_size, overlap=overlap)
        assert len(chunks) < len(plain_passage)

    @pytest.mark.parametrize("target_size", [150, 300, 600, 1000])
    def test_length_bounds(self, plain_passage, target_size):
        text = plain_passage + "\n\n" + TWENTY_WORDS + "\n\n" + plain_passage
        for chunk in chunk_text(text, target_size=target_size, overlap=50):
            assert 80 < len(chunk) <= target_size + 200

    def test_chunks_cover_text_in_order(self):
        """Test windows follow text order and leave no gap between them."""
        text = " ".join(
            f"Sentence {i} tells how the river runs past the old mill." for i in range(40)
        )
        chunks = chunk_text(text)

        starts = [text.index(chunk) for chunk in chunks]
        assert starts[0] == 0
        assert starts == sorted(starts)
        for start, previous_start, previous in zip(starts[1:], starts, chunks):
            assert start <= previous_start + len(previous)
        assert starts[-1] + len(chunks[-1]) == len(text)

    def test_is_deterministic(self, plain_passage):
        assert chunk_text(plain_passage) == chunk_text(plain_passage)

    @pytest.mark.parametrize("target_size,overlap", [(0, 10), (-5, 0), (100, -1)])
    def test_invalid_parameters(self, target_size, overlap):
        with pytest.raises(InputError):
            chunk_text("anything", target_size=target_size, overlap=overlap)
