"""yieldvault - pooled-capital yield vault with two pluggable strategies."""

__version__ = "0.1.0"
