"""Compile annotated Rust struct definitions into validator descriptors."""

__version__ = "0.1.0"
