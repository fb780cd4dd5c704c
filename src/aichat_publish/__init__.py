"""Export Claude Code session transcripts to Markdown and GitHub gists."""

__version__ = "0.1.0"
