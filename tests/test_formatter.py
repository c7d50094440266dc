"""Tests for the SQL formatter."""

from __future__ import annotations

import re

import pytest

from querydeck.config.settings import FormattingSettings
from querydeck.sql.formatter import MAJOR_CLAUSE_WORDS, RESERVED_WORDS, format_sql

MULTILINE = FormattingSettings(multiline_layout=True)
SINGLE_LINE = FormattingSettings(multiline_layout=False)

QUERIES = [
    "select * from foo where id=1",
    "  select   *   from dual  ",
    "select a, b from t where x = 1 and y = 2 or z = 3 group by a order by b limit 10",
    "Select count(*) As n From orders o Left Join users u On o.user_id = u.id",
    "insert into t (a,b) values (1,2)",
    "update t set a = 1 where id in (1, 2 ,3)",
    "select f() from t having sum( x ) > 2",
    "select a\n\tfrom t\n\n where b = 'and'",
    "",
]


class TestScenarios:
    def test_multiline_select(self) -> None:
        assert format_sql("select * from foo where id=1", MULTILINE) == (
            "SELECT *\nFROM foo\nWHERE id=1"
        )

    def test_single_line_collapses_whitespace(self) -> None:
        assert format_sql("  select   *   from dual  ", SINGLE_LINE) == "SELECT * FROM dual"


class TestKeywordCasing:
    def test_upper_cases_reserved_words(self) -> None:
        result = format_sql(
            "Select a As b From t Left Join u On t.id = u.id", SINGLE_LINE
        )
        assert result == "SELECT a AS b FROM t LEFT JOIN u ON t.id = u.id"

    def test_matches_whole_words_only(self) -> None:
        result = format_sql("select fromage, order_id, android from orders", SINGLE_LINE)
        assert result == "SELECT fromage, order_id, android FROM orders"

    def test_multi_word_keyword_with_irregular_spacing(self) -> None:
        assert format_sql("select a from t order   by a", SINGLE_LINE) == (
            "SELECT a FROM t ORDER BY a"
        )

    def test_ddl_keywords(self) -> None:
        assert format_sql("create index idx on t (a)", SINGLE_LINE) == (
            "CREATE INDEX idx ON t (a)"
        )

    def test_keywords_inside_string_literals_are_upper_cased(self) -> None:
        # No lexical awareness of literals.
        assert format_sql("select 'from here' from t", SINGLE_LINE) == (
            "SELECT 'FROM here' FROM t"
        )

    @pytest.mark.parametrize("query", QUERIES)
    @pytest.mark.parametrize("settings", [MULTILINE, SINGLE_LINE], ids=["multi", "single"])
    def test_no_lowercase_keyword_survives(self, query: str, settings: FormattingSettings) -> None:
        result = format_sql(query, settings)
        for word in RESERVED_WORDS:
            pattern = r"\b" + r"\s+".join(word.split()) + r"\b"
            for match in re.finditer(pattern, result, re.IGNORECASE):
                assert match.group(0) == match.group(0).upper()


class TestMultilineLayout:
    def test_each_major_clause_starts_a_line(self) -> None:
        result = format_sql(
            "select a, b from t where x = 1 and y = 2 or z = 3 group by a order by b limit 10",
            MULTILINE,
        )
        assert result.splitlines() == [
            "SELECT a, b",
            "FROM t",
            "WHERE x = 1",
            "AND y = 2",
            "OR z = 3",
            "GROUP BY a",
            "ORDER BY b",
            "LIMIT 10",
        ]

    @pytest.mark.parametrize("query", QUERIES)
    def test_major_clause_words_lead_their_line(self, query: str) -> None:
        result = format_sql(query, MULTILINE)
        for word in MAJOR_CLAUSE_WORDS:
            for match in re.finditer(r"\b" + word + r"\b", result):
                assert match.start() == 0 or result[match.start() - 1] == "\n"

    def test_order_by_is_not_split_as_or(self) -> None:
        assert format_sql("select a from t order by a", MULTILINE) == (
            "SELECT a\nFROM t\nORDER BY a"
        )

    def test_punctuation_spacing(self) -> None:
        assert format_sql("select count(*),max(a) from t", MULTILINE) == (
            "SELECT count( *), max( a)\nFROM t"
        )

    def test_text_without_major_clause_stays_on_one_line(self) -> None:
        result = format_sql("insert into t (a,b) values (1,2)", MULTILINE)
        assert "\n" not in result
        assert result.startswith("INSERT")
        assert "a, b" in result

    def test_reformats_previous_multiline_output(self) -> None:
        text = "SELECT a\nFROM t"
        assert format_sql(text, SINGLE_LINE) == "SELECT a FROM t"

    def test_keyword_without_fragment(self) -> None:
        assert format_sql("select", MULTILINE) == "SELECT"


class TestIdempotence:
    @pytest.mark.parametrize("query", QUERIES)
    @pytest.mark.parametrize("settings", [MULTILINE, SINGLE_LINE], ids=["multi", "single"])
    def test_formatting_twice_is_stable(self, query: str, settings: FormattingSettings) -> None:
        once = format_sql(query, settings)
        assert format_sql(once, settings) == once

    @pytest.mark.parametrize("settings", [MULTILINE, SINGLE_LINE], ids=["multi", "single"])
    def test_empty_text(self, settings: FormattingSettings) -> None:
        assert format_sql("", settings) == ""
        assert format_sql("   \n\t", settings) == ""
