import pytest

from mood_engine.models import Emotion, MoodLabelTag, MoodScoreTag
from mood_engine.mood_scale import (
    emotion_for_label,
    emotion_to_label,
    emotion_to_score,
    format_score_tag,
    label_to_score,
    mood_tags_for,
    mood_value_from_tags,
    parse_mood_tag,
    resolve_mood_tag,
    score_tag_to_score,
    score_to_display_label,
    view_mood_label,
)


class TestTables:
    @pytest.mark.parametrize("emotion", list(Emotion))
    def test_label_and_score_agree(self, emotion):
        # the label an emotion writes and the score it writes land on the same value
        assert label_to_score(emotion_to_label(emotion)) == score_tag_to_score(emotion_to_score(emotion))

    def test_compassion_shares_calm_label(self):
        assert emotion_to_label(Emotion.COMPASSION) == "Ruhig"
        assert emotion_to_score(Emotion.COMPASSION) == 3

    def test_emotion_for_label_takes_first_in_table(self):
        assert emotion_for_label("ruhig") == Emotion.CALM
        assert emotion_for_label("Neutral") == Emotion.NEUTRAL
        assert emotion_for_label("Müde") is None

    def test_mood_tags_for(self):
        assert mood_tags_for(Emotion.ANGER) == ("mood:Wütend", "moodScore:0")


class TestScoreConversion:
    def test_range(self):
        assert [score_tag_to_score(n) for n in range(5)] == [-2.0, -1.0, 0.0, 1.0, 2.0]

    def test_out_of_range_is_clamped(self):
        assert score_tag_to_score(9) == 2.0
        assert score_tag_to_score(-3) == -2.0
        assert format_score_tag(7) == "moodScore:4"

    def test_display_labels(self):
        assert score_to_display_label(0) == "Sehr schlecht"
        assert score_to_display_label(4) == "Sehr gut"

    def test_label_lookup_is_case_and_accent_tolerant(self):
        assert label_to_score("GLÜCKLICH") == 2.0
        assert label_to_score("gluecklich") == 2.0
        assert label_to_score("wuetend") == -2.0
        assert label_to_score("Müde") is None


class TestParseMoodTag:
    def test_score(self):
        assert parse_mood_tag("moodScore:3") == MoodScoreTag(3)
        assert parse_mood_tag("moodScore: 12") == MoodScoreTag(4)

    def test_bad_score(self):
        assert parse_mood_tag("moodScore:abc") is None
        assert parse_mood_tag("moodScore:") is None

    def test_label(self):
        assert parse_mood_tag("mood:Ruhig") == MoodLabelTag("Ruhig")
        assert parse_mood_tag("mood:") is None

    def test_other_tags(self):
        assert parse_mood_tag("sport") is None
        assert parse_mood_tag("") is None


class TestResolve:
    def test_score_wins_over_label(self):
        tags = ["mood:Wütend", "moodScore:4"]
        assert resolve_mood_tag(tags) == MoodScoreTag(4)
        assert mood_value_from_tags(tags) == 2.0

    def test_bad_score_falls_back_to_label(self):
        assert mood_value_from_tags(["moodScore:abc", "mood:Traurig"]) == -1.0

    def test_unknown_label_is_skipped(self):
        assert resolve_mood_tag(["mood:Müde", "mood:Ruhig"]) == MoodLabelTag("Ruhig")
        assert mood_value_from_tags(["mood:Müde"]) is None

    def test_no_tags(self):
        assert resolve_mood_tag([]) is None
        assert mood_value_from_tags(None) is None


class TestViewLabel:
    def test_matching_label_is_shown(self):
        assert view_mood_label(["mood:Ruhig", "moodScore:3"]) == "Ruhig"

    def test_conflicting_label_gives_score_text(self):
        assert view_mood_label(["mood:Wütend", "moodScore:4"]) == "Sehr gut"

    def test_score_only(self):
        assert view_mood_label(["moodScore:0"]) == "Sehr schlecht"

    def test_label_only_and_unknown(self):
        assert view_mood_label(["mood:Gestresst"]) == "Gestresst"
        assert view_mood_label(["mood:Müde"]) == "Müde"
        assert view_mood_label(["sport"]) == ""
