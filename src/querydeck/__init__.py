"""querydeck: format, run and review Cloud Spanner SQL from the terminal."""

__version__ = "0.1.0"
