#!/usr/bin/env python3
"""
ELF Section Resolver
====================

Looks up sections of the original ELF file by name through the section
header string table (e_shstrndx). Addresses reported are the sections'
recorded sh_addr values, not offsets into a loaded image.

A section name is the NUL terminated string starting at
``string_table_offset + sh_name``; it only has to lie inside the input.
Entries whose name starts outside the input, or runs to the end of it
without a terminator, never match.
"""

from typing import List, Optional, Union

from .elf_header import HeaderAccessor
from .exceptions import (MalformedSectionTableError, MalformedStringTableError,
                         NotELFError, TruncatedFieldError)
from .types import SectionHeader, SectionInfo


def _open_section_table(buf) -> HeaderAccessor:
    try:
        return HeaderAccessor(buf)
    except TruncatedFieldError as e:
        raise NotELFError(f"Truncated ELF header: {e}") from e


def _read_string_table(buf, accessor: HeaderAccessor) -> Optional[bytes]:
    """
    Return the input from the string table offset to its end, or None if the
    file has no usable string table
    """
    header = accessor.header
    if header.shstrndx == 0 or header.shnum == 0:
        return None

    if header.shstrndx >= header.shnum:
        raise MalformedStringTableError(
            f"String table index {header.shstrndx} out of range ({header.shnum} sections)")

    try:
        strtab = accessor.section_header(header.shstrndx)
    except TruncatedFieldError as e:
        raise MalformedStringTableError(f"String table header unreadable: {e}") from e

    if strtab.sh_size == 0:
        return None

    if strtab.sh_offset + strtab.sh_size > len(buf):
        raise MalformedStringTableError(
            f"String table (0x{strtab.sh_offset:x}+0x{strtab.sh_size:x}) "
            f"extends beyond the 0x{len(buf):x} byte input")

    return bytes(buf[strtab.sh_offset:])


def _section_name(strings: bytes, shdr: SectionHeader) -> Optional[bytes]:
    if shdr.sh_name >= len(strings):
        return None

    end = strings.find(b'\0', shdr.sh_name)
    if end < 0:
        return None
    return strings[shdr.sh_name:end]


def _iter_named_sections(buf):
    accessor = _open_section_table(buf)
    strings = _read_string_table(buf, accessor)
    if strings is None:
        return

    try:
        for shdr in accessor.iter_section_headers():
            yield _section_name(strings, shdr), shdr
    except TruncatedFieldError as e:
        raise MalformedSectionTableError(f"Section header table unreadable: {e}") from e


def find_section(buf, name: Union[str, bytes]) -> Optional[SectionInfo]:
    """
    Find a section by name.

    Section headers are scanned in table order and the first exact match
    wins.

    Args:
        buf: ELF image (bytes-like)
        name: section name, e.g. ".text"

    Returns:
        SectionInfo(addr, size) of the section, or None when the file has no
        sections, no string table or no section of that name

    Raises:
        NotELFError: buf is not an ELF image, or its file header is truncated
        MalformedStringTableError: string table header or contents lie outside buf
        MalformedSectionTableError: section header table lies outside buf
    """
    if isinstance(name, str):
        name = name.encode('utf-8')

    for section_name, shdr in _iter_named_sections(buf):
        if section_name == name:
            return SectionInfo(shdr.sh_addr, shdr.sh_size)
    return None


def section_names(buf) -> List[str]:
    """Names of all sections in section header table order, unreadable names skipped"""
    return [section_name.decode('utf-8', errors='replace')
            for section_name, _ in _iter_named_sections(buf)
            if section_name is not None]
