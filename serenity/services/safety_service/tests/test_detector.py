"""Tests for CrisisDetector - safety-critical, so both directions are covered.

False negatives (missed crisis language) and false positives from
partial-word matches are both regressions.
"""
import pytest

from serenity.services.safety_service.config import CRISIS_PHRASES
from serenity.services.safety_service.detector import CrisisDetector, normalize_text


@pytest.fixture
def detector():
    return CrisisDetector()


class TestCrisisPhrases:
    """Every configured phrase must trigger as a whole word."""

    @pytest.mark.parametrize("phrase", sorted(CRISIS_PHRASES))
    def test_each_phrase_triggers(self, detector, phrase):
        assert detector.is_crisis(f"honestly {phrase} right now") is True

    def test_want_to_die(self, detector):
        verdict = detector.detect("I want to die")
        assert verdict.is_crisis is True
        assert verdict.matched_phrases == ("want to die",)

    def test_case_insensitive(self, detector):
        assert detector.is_crisis("I WANT TO END MY LIFE") is True

    def test_extra_whitespace_inside_phrase(self, detector):
        assert detector.is_crisis("i want   to\tdie") is True

    def test_curly_apostrophe(self, detector):
        assert detector.is_crisis("I can’t go on like this") is True

    def test_multiple_matches_are_distinct(self, detector):
        verdict = detector.detect("suicide, suicide, I want to kill myself")
        assert set(verdict.matched_phrases) == {"suicide", "kill myself"}


class TestSafeMessages:

    @pytest.mark.parametrize("text", [
        "I feel okay today",
        "I had a stressful exam but it went fine",
        "My journal helps me relax",
        "",
    ])
    def test_ordinary_messages(self, detector, text):
        assert detector.is_crisis(text) is False

    def test_verdict_is_falsy(self, detector):
        assert not detector.detect("I feel okay today")


class TestWordBoundaries:
    """Partial-word matches must not trigger."""

    def test_hopelessly_does_not_match_hopeless(self):
        detector = CrisisDetector(phrases=["hopeless"])
        assert detector.is_crisis("I'm hopelessly devoted to my cat") is False
        assert detector.is_crisis("I feel hopeless") is True

    def test_suffix_does_not_match(self, detector):
        assert detector.is_crisis("the suicides statistics lecture") is False

    def test_prefix_does_not_match(self, detector):
        assert detector.is_crisis("antisuicide campaign poster") is False

    def test_hyphenated_variant_is_whole_word(self, detector):
        assert detector.is_crisis("thinking about self-harm again") is True
        assert detector.is_crisis("self-harming") is False


class TestConfiguration:

    def test_custom_phrase_list(self):
        detector = CrisisDetector(phrases=["disappear forever"])
        assert detector.is_crisis("I want to disappear forever") is True
        assert detector.is_crisis("I want to die") is False

    def test_empty_phrase_list_rejected(self):
        with pytest.raises(ValueError):
            CrisisDetector(phrases=[])


class TestNormalizeText:

    def test_folds_fullwidth_letters(self):
        assert normalize_text("ｓｕｉｃｉｄｅ") == "suicide"

    def test_collapses_whitespace(self):
        assert normalize_text("  a \n b  ") == "a b"
