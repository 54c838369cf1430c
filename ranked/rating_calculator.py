from typing import Tuple

RATING_DELTA = 5
INITIAL_SCORE = 100

# (score, wins, losses)
Rating = Tuple[int, int, int]


class RatingCalculator:
    """
    Fixed-step rating arithmetic.
    A win adds ``delta``; a loss subtracts it, saturating at zero.
    """

    def __init__(self, delta: int = RATING_DELTA, initial_score: int = INITIAL_SCORE):
        if delta < 0:
            raise ValueError("delta must be non-negative")
        if initial_score < 0:
            raise ValueError("initial_score must be non-negative")
        self.delta = delta
        self.initial_score = initial_score

    def initial_rating(self) -> Rating:
        return (self.initial_score, 0, 0)

    def calculate_rating_change(self, score: int, did_win: bool) -> int:
        """
        Calculate the new score after one result.

        Args:
            score: Current score (never negative)
            did_win: Whether the player's team won

        Returns:
            The new score
        """
        if did_win:
            return score + self.delta
        return max(0, score - self.delta)

    def get_rating_change_amount(self, score: int, did_win: bool) -> int:
        """
        Get the signed change without applying it.
        Losses near zero return less than ``delta`` in magnitude.
        """
        return self.calculate_rating_change(score, did_win) - score

    def apply_result(self, rating: Rating, did_win: bool) -> Rating:
        score, wins, losses = rating
        new_score = self.calculate_rating_change(score, did_win)
        if did_win:
            return (new_score, wins + 1, losses)
        return (new_score, wins, losses + 1)
