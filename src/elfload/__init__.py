#!/usr/bin/env python3
"""
elfload
=======

ELF image loader: detects 32/64-bit, little/big-endian ELF images, copies
their PT_LOAD segments into a caller-supplied flat buffer relative to the
lowest segment physical address, and resolves named sections.

核心模块：
- utils: ELF magic detection, logging setup
- elf_header: width/endian-generic header field access
- elf_loader: segment loader and file-based front end
- elf_sections: section lookup through the section name string table
- compress: gzip / raw deflate pre-stage
- main: command line program
"""

__version__ = "1.0.0"

from .utils import is_elf
from .elf_loader import load, plan_load, required_size, ELFImageLoader
from .elf_sections import find_section, section_names
from .compress import decompress, detect_compression, is_compressed
from .types import LoadResult, SectionInfo, SegmentPlacement
from .exceptions import *
from .main import main

__all__ = [
    'is_elf',
    'load',
    'plan_load',
    'required_size',
    'find_section',
    'section_names',
    'decompress',
    'detect_compression',
    'is_compressed',
    'ELFImageLoader',
    'LoadResult',
    'SectionInfo',
    'SegmentPlacement',
    'ELFError',
    'LoadError',
    'SectionLookupError',
    'NotELFError',
    'NoLoadableSegmentsError',
    'InputOverflowError',
    'OutputOverflowError',
    'MalformedStringTableError',
    'MalformedSectionTableError',
    'DecompressionError',
    'main',
]
