"""Stream monitor: checks that network audio streams carry live audio."""

__version__ = "1.0.0"
