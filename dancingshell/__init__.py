"""Stages of a small command shell: tokenizer, syntax checks, expansion, builtins, here-documents and pipelines."""

__version__ = "1.0.0"