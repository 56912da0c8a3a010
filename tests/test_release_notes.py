"""Tests for adolinks.workitems.release_notes module."""

import pytest

from adolinks.workitems.release_notes import extract_release_note

PREFIX = "= Changelog ="


class TestExtractReleaseNote:
    """Tests for extract_release_note."""

    def test_prefix_is_removed_and_trimmed(self):
        comments = ["= Changelog = README riddle now has an answer!  "]

        assert extract_release_note(comments, PREFIX) == "README riddle now has an answer!"

    def test_last_matching_comment_wins(self):
        comments = [
            "= Changelog = First note",
            "Looks good to me",
            "= Changelog = Revised note",
            "Deployed",
        ]

        assert extract_release_note(comments, PREFIX) == "Revised note"

    def test_match_is_case_insensitive(self):
        assert extract_release_note(["= CHANGELOG = Loud"], PREFIX) == "Loud"

    def test_prefix_must_start_the_comment(self):
        assert extract_release_note(["See = Changelog = below"], PREFIX) is None

    def test_prefix_is_literal(self):
        """Regex metacharacters in the prefix have no special meaning."""
        comments = ["Release note: fixed", "[RN] (1.2) Added search"]

        assert extract_release_note(comments, "[RN] (1.2)") == "Added search"
        assert extract_release_note(comments, "R.lease") is None

    def test_only_first_occurrence_is_removed(self):
        assert extract_release_note(["RN: RN: twice"], "RN:") == "RN: twice"

    def test_no_match(self):
        assert extract_release_note(["nothing here"], PREFIX) is None

    def test_prefix_only_comment_gives_empty_note(self):
        assert extract_release_note(["= Changelog =   "], PREFIX) == ""

    @pytest.mark.parametrize("prefix", [None, "", "   "])
    def test_blank_prefix(self, prefix):
        assert extract_release_note(["= Changelog = note"], prefix) is None

    def test_empty_and_none_comments_are_skipped(self):
        assert extract_release_note(["= Changelog = kept", "", None], PREFIX) == "kept"
