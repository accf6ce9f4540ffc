"""
String similarity based on edit distance.
"""
import math

from rapidfuzz.distance import Levenshtein


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))


def edit_distance(s1: str, s2: str) -> int:
    """
    Levenshtein distance between two strings.

    Insertions, deletions and substitutions cost 1 per code point;
    transpositions are not special.
    """
    return Levenshtein.distance(s1, s2)


def similarity(s1: str, s2: str) -> int:
    """
    Similarity of two strings as a percentage (0-100).

    Identical strings (including two empty ones) score 100; an empty string
    against a non-empty one scores 0.
    """
    if s1 == s2:
        return 100
    if not s1 or not s2:
        return 0
    longest = max(len(s1), len(s2))
    return round_half_up((1 - edit_distance(s1, s2) / longest) * 100)
