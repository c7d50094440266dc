"""HTTP routes exposing the session manager."""
