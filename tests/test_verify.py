"""Tests for dictionaries and candidate word checks."""

import asyncio
import json
import logging

import pytest

from letterstacks.verifiers import (
    AllowAnyDictionary,
    Candidate,
    WordListDictionary,
    build_candidate,
    check_candidate,
    create_dictionary,
    is_playable,
    load_word_list,
    normalize_word,
    still_matches,
    TOO_SHORT,
)


def check(dictionary, word):
    return asyncio.run(dictionary.check_word(word))


class TestNormalize:
    """Test word normalization."""

    def test_normalize(self):
        assert normalize_word("  Cat ") == "cat"
        assert normalize_word(None) == ""

    @pytest.mark.parametrize("word,playable", [
        ("cat", True),
        ("ca", False),
        ("", False),
        ("c4t", False),
        ("don't", False),
        ("tacos", True),
    ])
    def test_is_playable(self, word, playable):
        """Playable words are alphabetic with 3+ letters."""
        assert is_playable(word) == playable


class TestWordListDictionary:
    """Test the word list dictionary."""

    def test_lookup_is_case_insensitive(self):
        """Any casing of a listed word is accepted."""
        dictionary = WordListDictionary.from_words(["Cat", "dog"])
        assert check(dictionary, "CAT")
        assert check(dictionary, "cat")
        assert check(dictionary, "Dog")
        assert not check(dictionary, "cow")

    def test_short_words_never_valid(self):
        """Words under three letters are rejected even if listed."""
        dictionary = WordListDictionary.from_words(["at", "cat"])
        assert not check(dictionary, "at")

    def test_load_text_file(self, tmp_path):
        """One word per line; junk lines are skipped."""
        path = tmp_path / "words.txt"
        path.write_text("cat\nDOG\n\nab\nc4t\n  tacos  \n")

        assert load_word_list(path) == {"cat", "dog", "tacos"}
        dictionary = WordListDictionary(path=path)
        assert check(dictionary, "tacos")
        assert dictionary.available

    def test_load_json_file(self, tmp_path):
        """A JSON array of strings is also accepted."""
        path = tmp_path / "words.json"
        path.write_text(json.dumps(["cat", "Dog", 7, "ox"]))

        assert load_word_list(path) == {"cat", "dog"}

    def test_json_must_be_array(self, tmp_path):
        """A JSON object is a malformed word list."""
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"cat": 1}))

        with pytest.raises(ValueError):
            load_word_list(path)

    def test_missing_file_strict_rejects(self, tmp_path, caplog):
        """Strict fallback rejects everything when the list is unavailable."""
        dictionary = WordListDictionary(path=tmp_path / "missing.txt")

        with caplog.at_level(logging.WARNING):
            assert not check(dictionary, "cat")
        assert "Failed to load word list" in caplog.text
        assert not dictionary.available

    def test_missing_file_allow_any_accepts(self, tmp_path):
        """allow_any accepts playable words when the list is unavailable."""
        dictionary = WordListDictionary(path=tmp_path / "missing.txt", fallback="allow_any")
        assert check(dictionary, "zzz")
        assert not check(dictionary, "zz")

    def test_no_path_is_unavailable(self):
        """No configured list behaves like a failed load."""
        assert not check(WordListDictionary(), "cat")
        assert check(WordListDictionary(fallback="allow_any"), "cat")

    def test_load_happens_once(self, tmp_path):
        """The file is read on first use only."""
        path = tmp_path / "words.txt"
        path.write_text("cat\n")
        dictionary = WordListDictionary(path=path)
        assert check(dictionary, "cat")

        path.write_text("dog\n")

        assert check(dictionary, "cat")
        assert not check(dictionary, "dog")

    def test_create_dictionary(self, tmp_path):
        """create_dictionary builds from config values."""
        path = tmp_path / "words.txt"
        path.write_text("cat\n")
        assert check(create_dictionary(str(path)), "cat")
        assert create_dictionary(None, "allow_any").fallback == "allow_any"


class TestAllowAnyDictionary:
    """Test the debug dictionary."""

    def test_accepts_playable_words(self):
        dictionary = AllowAnyDictionary()
        assert check(dictionary, "qzx")
        assert not check(dictionary, "qz")
        assert not check(dictionary, "q1x")

    def test_announces_itself(self, caplog):
        """Creating it logs a warning."""
        with caplog.at_level(logging.WARNING):
            AllowAnyDictionary()
        assert "AllowAnyDictionary active" in caplog.text


class TestCandidates:
    """Test reading and checking candidates."""

    def test_build_in_selection_order(self):
        """Letters come from stack tops in click order."""
        stacks = [["X", "T"], ["A"], ["C"]]
        candidate = build_candidate(stacks, [2, 1, 0])

        assert candidate.word == "CAT"
        assert candidate.tiles == [2, 1, 0]
        assert candidate.letters == ["C", "A", "T"]
        assert candidate.length == 3

    def test_empty_cells_left_out(self):
        """Empty stacks contribute nothing."""
        candidate = build_candidate([["C"], [], ["T"]], [0, 1, 2])
        assert candidate.word == "CT"
        assert candidate.tiles == [0, 2]

    def test_too_short(self):
        error = check_candidate(Candidate(word="AT", tiles=[0, 1], letters=["A", "T"]))
        assert error.code == TOO_SHORT
        assert error.word == "AT"

    def test_long_enough_goes_to_dictionary(self):
        assert check_candidate(Candidate(word="CAT", tiles=[0, 1, 2], letters=["C", "A", "T"])) is None

    def test_still_matches(self):
        """A candidate matches while every tile shows its letter."""
        stacks = [["C"], ["A"], ["T"]]
        candidate = build_candidate(stacks, [0, 1, 2])
        assert still_matches(stacks, candidate)

        stacks[1].append("Q")
        assert not still_matches(stacks, candidate)

        stacks[1].pop()
        stacks[2].pop()
        assert not still_matches(stacks, candidate)
