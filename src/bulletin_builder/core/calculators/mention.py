"""
Mention classifier
Maps a 0-20 average to its qualitative band, top band first.
Bands are half-open at the top: exactly 16, 14, 12, 10 and 8 belong to the upper band.
"""

from bulletin_builder.core.models import MAX_GRADE, MIN_GRADE, Mention
from bulletin_builder.exceptions import ValidationError

# (lower bound, mention), evaluated from the top down
MENTION_BANDS = [
    (16.0, Mention.EXCELLENT),
    (14.0, Mention.TRES_BIEN),
    (12.0, Mention.BIEN),
    (10.0, Mention.ASSEZ_BIEN),
    (8.0, Mention.PASSABLE),
    (MIN_GRADE, Mention.INSUFFISANT),
]


class MentionClassifier:
    """Classify averages into mentions"""

    def classify(self, average: float) -> Mention:
        if average is None or not (MIN_GRADE <= average <= MAX_GRADE):
            raise ValidationError(f"Moyenne hors barème (0-20): {average!r}")

        for lower_bound, mention in MENTION_BANDS:
            if average >= lower_bound:
                return mention
        return Mention.INSUFFISANT


def get_mention(average: float) -> Mention:
    return MentionClassifier().classify(average)
