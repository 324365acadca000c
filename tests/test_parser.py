"""Tests for batch query parsing and request limits."""

import pytest
from pipeline.parser import apply_extension, parse_batch_request, parse_queries_text, validate_count
from pipeline.scraper.errors import InvalidRequestError


def test_parse_queries_text_splits_lines():
    text = "Snow mobile safari\r\nSanta Claus village\n\n   \nGlass igloo hotel  \r"

    assert parse_queries_text(text) == ["Snow mobile safari", "Santa Claus village", "Glass igloo hotel"]
    assert parse_queries_text("") == []
    assert parse_queries_text(None) == []


def test_apply_extension():
    assert apply_extension(["husky ride", "sauna"], "arctic finland") == [
        "husky ride arctic finland",
        "sauna arctic finland",
    ]
    assert apply_extension(["sauna"], "   ") == ["sauna"]
    assert apply_extension(["sauna"], None) == ["sauna"]


def test_text_takes_precedence_over_list():
    queries = parse_batch_request(queries_text="a\nb", queries=["c"], count_per_query=5)
    assert queries == ["a", "b"]


def test_list_used_when_no_text():
    queries = parse_batch_request(queries=[" c ", "", "d"], extension="winter")
    assert queries == ["c winter", "d winter"]


def test_rejects_empty_batch():
    with pytest.raises(InvalidRequestError, match="At least one"):
        parse_batch_request(queries_text="\n\n")


def test_rejects_too_many_queries():
    text = "\n".join(f"query {i}" for i in range(51))
    with pytest.raises(InvalidRequestError, match="Maximum 50"):
        parse_batch_request(queries_text=text)


@pytest.mark.parametrize("count", [0, -1, 101, True, "20"])
def test_rejects_bad_counts(count):
    with pytest.raises(InvalidRequestError):
        validate_count(count)


def test_accepts_count_bounds():
    assert validate_count(1) == 1
    assert validate_count(100) == 100
