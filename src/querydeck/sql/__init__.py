from querydeck.sql.formatter import (
    MAJOR_CLAUSE_WORDS,
    RESERVED_WORDS,
    format_sql,
    uppercase_keywords,
)

__all__ = ["MAJOR_CLAUSE_WORDS", "RESERVED_WORDS", "format_sql", "uppercase_keywords"]
