"""
Unit Tests for Mention Classifier

Tests band boundaries, monotonicity and rejection of out-of-scale averages.
"""

import pytest

from bulletin_builder.core.calculators import MentionClassifier, get_mention
from bulletin_builder.core.models import Mention
from bulletin_builder.exceptions import ValidationError


class TestMentionClassifier:
    """Tests for MentionClassifier class"""

    @pytest.mark.parametrize("average,expected", [
        (20.0, Mention.EXCELLENT),
        (16.0, Mention.EXCELLENT),
        (15.99, Mention.TRES_BIEN),
        (15.0, Mention.TRES_BIEN),
        (14.0, Mention.TRES_BIEN),
        (13.99, Mention.BIEN),
        (12.0, Mention.BIEN),
        (11.99, Mention.ASSEZ_BIEN),
        (10.0, Mention.ASSEZ_BIEN),
        (9.99, Mention.PASSABLE),
        (8.0, Mention.PASSABLE),
        (7.99, Mention.INSUFFISANT),
        (6.0, Mention.INSUFFISANT),
        (0.0, Mention.INSUFFISANT),
    ])
    def test_band_boundaries(self, average, expected):
        """Test each boundary belongs to the upper band"""
        assert MentionClassifier().classify(average) == expected

    def test_mention_is_monotonic(self):
        """Test a higher average never gets a lower mention"""
        classifier = MentionClassifier()
        averages = [i / 4 for i in range(0, 81)]  # 0.00, 0.25, ..., 20.00

        levels = [classifier.classify(a).level for a in averages]

        assert levels == sorted(levels)
        assert levels[0] == Mention.INSUFFISANT.level
        assert levels[-1] == Mention.EXCELLENT.level

    @pytest.mark.parametrize("average", [-0.01, 20.01, 100, None])
    def test_out_of_scale_raises(self, average):
        """Test averages outside 0-20 are rejected"""
        with pytest.raises(ValidationError):
            MentionClassifier().classify(average)

    def test_get_mention_helper(self):
        assert get_mention(17.5) == Mention.EXCELLENT
        assert get_mention(9) == Mention.PASSABLE

    def test_mention_values_are_display_strings(self):
        assert Mention.TRES_BIEN.value == "Très bien"
        assert Mention.ASSEZ_BIEN.value == "Assez bien"
