"""File-backed, cost-aware response cache for Perplexity research tools."""

__version__ = "0.1.0"
