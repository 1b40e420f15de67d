"""Example checks. Point ``checks:`` in your config at your own functions."""
