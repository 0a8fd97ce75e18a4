"""Data types, configuration and helpers shared by the decoder and the tools."""
