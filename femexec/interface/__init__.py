# -*- coding: utf-8 -*-
# femexec/interface/__init__.py

"""
Project: femexec
Date: 3/4/2026

Modules:
--------
- formats: UTF-8 text opening with transparent gzip support, delimiter sniffing,
           and blank/comment line detection for result files.

- outputs: Result-file parsing into rectangular NumPy matrices and the background
           OutputFileParser task used after static runs.
"""

from .formats import open_text, sniff_delim, is_blank_or_comment
from .outputs import OutputParseError, OutputFileParser, read_matrix

__all__ = ["open_text", "sniff_delim", "is_blank_or_comment",
           "OutputParseError", "OutputFileParser", "read_matrix"]
