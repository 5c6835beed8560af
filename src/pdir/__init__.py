"""prompt-directory: a searchable catalog of prompts and blog posts."""

__version__ = "0.1.0"
