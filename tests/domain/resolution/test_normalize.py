from __future__ import annotations

import pytest

from mediabridge.domain.resolution import SeasonInfo, extract_season_info, normalize, similarity


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Attack on Titan", "attack on titan"),
        ("  Re:Zero -  Starting Life  ", "rezero starting life"),
        ("JoJo's Bizarre Adventure!", "jojos bizarre adventure"),
        ("Pokémon: The Movie", "pokémon the movie"),
        ("", ""),
    ],
)
def test_normalize_lowercases_strips_punctuation_and_collapses_whitespace(
    raw: str, expected: str
) -> None:
    assert normalize(raw) == expected


def test_normalize_is_idempotent() -> None:
    once = normalize("Fullmetal   Alchemist: Brotherhood!!")

    assert normalize(once) == once


def test_identical_normalized_titles_score_one() -> None:
    assert similarity("Attack on Titan", "attack on titan!") == 1.0
    assert similarity("", "") == 1.0


def test_substring_scores_length_ratio() -> None:
    score = similarity("Naruto Season 2", "Naruto")

    assert score == pytest.approx(len("naruto") / len("naruto season 2"))


def test_token_overlap_ignores_single_character_tokens() -> None:
    # shared tokens: "one", "piece"; "a" is ignored on both sides
    score = similarity("One Piece a Film", "Piece of One a Red")

    assert score == pytest.approx(2 / 4)


def test_no_shared_words_scores_zero() -> None:
    assert similarity("Bleach", "Monster") == 0.0
    assert similarity("x", "Monster") == 0.0


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ("Attack on Titan", "Attack no Titan OVA"),
        ("Naruto", "Naruto Shippuden"),
        ("Steins;Gate 0", "Steins Gate"),
        ("Spirited Away", "Howl's Moving Castle"),
        ("", "Anything"),
    ],
)
def test_similarity_is_symmetric_and_bounded(left: str, right: str) -> None:
    forward = similarity(left, right)

    assert forward == similarity(right, left)
    assert 0.0 <= forward <= 1.0


def test_self_similarity_is_one() -> None:
    for title in ("Cowboy Bebop", "Mob Psycho 100", "K-On!"):
        assert similarity(title, title) == 1.0


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Naruto", SeasonInfo("naruto")),
        ("Naruto Season 2", SeasonInfo("naruto", 2)),
        ("Attack on Titan 2nd Season", SeasonInfo("attack on titan", 2)),
        ("My Hero Academia S3", SeasonInfo("my hero academia", 3)),
        ("Attack on Titan Final Season Part 2", SeasonInfo("attack on titan final season", 2)),
        ("Overlord II", SeasonInfo("overlord", 2)),
        ("Mob Psycho 100 III", SeasonInfo("mob psycho 100", 3)),
        ("Kaguya-sama 3", SeasonInfo("kaguyasama", 3)),
        ("Mob Psycho 100", SeasonInfo("mob psycho 100")),
    ],
)
def test_extract_season_info(title: str, expected: SeasonInfo) -> None:
    assert extract_season_info(title) == expected


def test_roman_numeral_inside_a_title_is_not_a_season() -> None:
    assert extract_season_info("X-Men").season is None
    assert extract_season_info("Vinland Saga").season is None
