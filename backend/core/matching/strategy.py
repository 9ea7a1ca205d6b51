"""
Scoring strategies for comparing a user's ingredient tokens against a recipe's.
The orchestration code only depends on the MatchStrategy shape.
"""
from typing import List, Protocol, Sequence


class MatchStrategy(Protocol):
    def matched(self, user_tokens: Sequence[str], recipe_tokens: Sequence[str]) -> List[str]:
        """Recipe tokens considered covered by the user's ingredients."""
        ...

    def score(self, user_tokens: Sequence[str], recipe_tokens: Sequence[str]) -> float:
        """Match ratio in [0, 1]."""
        ...


class SubstringContainmentStrategy:
    """
    A recipe token counts as matched when it contains a user token or is
    contained in one ("trứng gà" ~ "trứng"). Ratio is matched / recipe tokens.
    """

    @staticmethod
    def _covers(user_token: str, recipe_token: str) -> bool:
        return user_token in recipe_token or recipe_token in user_token

    def matched(self, user_tokens: Sequence[str], recipe_tokens: Sequence[str]) -> List[str]:
        return [r for r in recipe_tokens if any(self._covers(u, r) for u in user_tokens)]

    def score(self, user_tokens: Sequence[str], recipe_tokens: Sequence[str]) -> float:
        if not recipe_tokens:
            return 0.0
        return len(self.matched(user_tokens, recipe_tokens)) / len(recipe_tokens)
