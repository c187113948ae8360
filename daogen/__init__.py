"""Building blocks for generating data-access code: SQL template parsing, clause helpers and model metadata."""

__version__ = "0.1.0"