from bulletin_builder.core.calculators.average import AverageCalculator, round_half_up
from bulletin_builder.core.calculators.mention import MentionClassifier, get_mention
from bulletin_builder.core.calculators.rank import RankEngine, RankResult

__all__ = [
    'AverageCalculator',
    'round_half_up',
    'MentionClassifier',
    'get_mention',
    'RankEngine',
    'RankResult',
]
