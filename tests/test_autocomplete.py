"""Tests for trigger detection and the match & filter engine."""

from __future__ import annotations

from tokenline.autocomplete import (
    StaticSuggestionProvider,
    detect_trigger,
    filter_suggestions,
    find_marker_start,
    open_session,
    update_session,
)
from tokenline.session import Session, Suggestion

CANDIDATES = ["React", "Redux", "DraftJS", "TypeScript"]


def _provider() -> StaticSuggestionProvider:
    return StaticSuggestionProvider(CANDIDATES)


def _labels(suggestions: tuple[Suggestion, ...]) -> list[str]:
    return [s.label for s in suggestions]


class TestDetectTrigger:
    def test_typing_closing_character_opens(self) -> None:
        assert detect_trigger("Hello <", "Hello <>", 8, "<>")

    def test_requires_single_character_insertion(self) -> None:
        assert not detect_trigger("Hello ", "Hello <>", 8, "<>")

    def test_deletion_never_triggers(self) -> None:
        assert not detect_trigger("Hello <>x", "Hello <>", 8, "<>")

    def test_marker_must_sit_right_before_caret(self) -> None:
        # ">" typed at the end, but the marker is elsewhere
        assert not detect_trigger("<>ab", "<>ab>", 5, "<>")

    def test_typing_opening_character_before_closing_one(self) -> None:
        # "<" inserted in front of an existing ">": caret sits between them
        assert not detect_trigger("a>", "a<>", 2, "<>")

    def test_caret_at_start(self) -> None:
        assert not detect_trigger("", ">", 0, "<>")

    def test_custom_marker(self) -> None:
        assert detect_trigger("x @", "x @@", 4, "@@")


class TestFindMarkerStart:
    def test_finds_last_marker_before_caret(self) -> None:
        assert find_marker_start("<>a <>bc", 8, "<>") == 4

    def test_ignores_marker_after_caret(self) -> None:
        assert find_marker_start("ab <>", 2, "<>") == -1

    def test_marker_must_be_wholly_before_caret(self) -> None:
        assert find_marker_start("a<>", 2, "<>") == -1
        assert find_marker_start("a<>", 3, "<>") == 1

    def test_short_caret(self) -> None:
        assert find_marker_start("<>", 1, "<>") == -1


class TestStaticSuggestionProvider:
    def test_empty_match_returns_everything_in_order(self) -> None:
        assert [s.label for s in _provider().get_suggestions("")] == CANDIDATES

    def test_prefix_match_is_case_insensitive(self) -> None:
        assert [s.label for s in _provider().get_suggestions("rE")] == ["React", "Redux"]

    def test_accepts_suggestion_objects(self) -> None:
        provider = StaticSuggestionProvider([Suggestion(label="Vue", data={"id": 1})])
        assert provider.get_suggestions("v")[0].data == {"id": 1}


class TestFilterSuggestions:
    def test_narrowing(self) -> None:
        assert _labels(filter_suggestions(_provider(), "R")) == ["React", "Redux"]
        assert _labels(filter_suggestions(_provider(), "Rea")) == ["React"]

    def test_no_match_yields_typed_text(self) -> None:
        assert _labels(filter_suggestions(_provider(), "Vue")) == ["Vue"]

    def test_no_match_with_empty_candidates(self) -> None:
        assert _labels(filter_suggestions(StaticSuggestionProvider([]), "")) == [""]

    def test_max_suggestions_caps_the_list(self) -> None:
        assert _labels(filter_suggestions(_provider(), "", max_suggestions=2)) == [
            "React",
            "Redux",
        ]

    def test_provider_results_are_prefix_filtered(self) -> None:
        class Loose:
            def get_suggestions(self, match_string: str) -> list[Suggestion]:
                return [Suggestion("Angular"), Suggestion("Alpine"), Suggestion("Ember")]

        assert _labels(filter_suggestions(Loose(), "a")) == ["Angular", "Alpine"]


class TestOpenSession:
    def test_starts_with_full_list(self) -> None:
        session = open_session(_provider())
        assert session.match_string == ""
        assert session.labels == CANDIDATES
        assert session.selected_index == 0


class TestUpdateSession:
    def test_match_string_is_text_after_marker(self) -> None:
        session = update_session(open_session(_provider()), "Hello <>Re", 10, "<>", _provider())
        assert session is not None
        assert session.match_string == "Re"
        assert session.labels == ["React", "Redux"]

    def test_match_string_stops_at_caret(self) -> None:
        session = update_session(open_session(_provider()), "<>Redux", 4, "<>", _provider())
        assert session is not None
        assert session.match_string == "Re"

    def test_cancels_when_marker_deleted(self) -> None:
        assert update_session(open_session(_provider()), "Hello <", 7, "<>", _provider()) is None

    def test_cancels_when_caret_moves_before_marker(self) -> None:
        assert update_session(open_session(_provider()), "Hello <>R", 6, "<>", _provider()) is None

    def test_uses_nearest_marker(self) -> None:
        session = update_session(open_session(_provider()), "<>x <>Ty", 8, "<>", _provider())
        assert session is not None
        assert session.match_string == "Ty"
        assert session.labels == ["TypeScript"]

    def test_highlight_kept_when_still_in_range(self) -> None:
        session = Session("", tuple(Suggestion(c) for c in CANDIDATES), selected_index=1)
        updated = update_session(session, "<>R", 3, "<>", _provider())
        assert updated is not None
        assert updated.selected_index == 1

    def test_highlight_clamped_when_list_shrinks(self) -> None:
        session = Session("", tuple(Suggestion(c) for c in CANDIDATES), selected_index=3)
        updated = update_session(session, "<>Re", 4, "<>", _provider())
        assert updated is not None
        assert updated.selected_index == 0
        assert 0 <= updated.selected_index < len(updated.suggestions)
