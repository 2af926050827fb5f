#!/usr/bin/env python3
"""
ELF Header Accessor
===================

Width- and endian-generic access to the ELF file, program and section headers.

Every field is decoded by an explicit (offset, width, byte order) read that is
bound-checked against the input buffer first; no header record is ever
overlaid on the raw bytes. 32-bit address and size fields come back as plain
Python ints, so downstream arithmetic is identical for both classes.
"""

import struct
from typing import Iterator

from .exceptions import NotELFError, TruncatedFieldError
from .types import *
from .utils import is_elf

_FIELD_CODES = {1: 'B', 2: 'H', 4: 'I', 8: 'Q'}

_BYTE_ORDERS = {
    ELFData.ELFDATA2LSB: '<',
    ELFData.ELFDATA2MSB: '>',
}


def read_field(buf, offset: int, width: int, byte_order: str) -> int:
    """
    Read one unsigned integer field from a buffer.

    Args:
        buf: bytes-like object to read from
        offset: byte offset of the field
        width: field width in bytes (1, 2, 4 or 8)
        byte_order: '<' for little endian, '>' for big endian

    Returns:
        The field value converted to host order

    Raises:
        TruncatedFieldError: the field does not lie entirely inside buf
    """
    if offset < 0 or offset + width > len(buf):
        raise TruncatedFieldError(
            f"Field at 0x{offset:x} (width {width}) lies outside the "
            f"0x{len(buf):x} byte buffer", offset, width, len(buf))
    return struct.unpack_from(byte_order + _FIELD_CODES[width], buf, offset)[0]


def identify(buf) -> ELFIdent:
    """
    Decode and validate the identification record.

    Raises:
        NotELFError: bad magic or version, or an unknown class/encoding byte
    """
    if not is_elf(buf):
        raise NotELFError("Not a valid ELF image (bad magic or version)")

    try:
        elf_class = ELFClass(buf[EI_CLASS])
        data = ELFData(buf[EI_DATA])
    except ValueError as e:
        raise NotELFError(f"Unsupported ELF identification: {e}") from e

    if elf_class == ELFClass.ELFCLASSNONE or data == ELFData.ELFDATANONE:
        raise NotELFError(
            f"Unsupported ELF identification: class={buf[EI_CLASS]}, data={buf[EI_DATA]}")

    return ELFIdent(elf_class, data, buf[EI_VERSION])


def get_elf_layouts(is_64bit: bool):
    """
    根据ELF架构获取相应的字段布局

    Returns:
        Dict with the 'Ehdr', 'Phdr' and 'Shdr' field layouts
    """
    if is_64bit:
        return {
            'Ehdr': ELF64_EHDR,
            'Phdr': ELF64_PHDR,
            'Shdr': ELF64_SHDR,
        }
    else:
        return {
            'Ehdr': ELF32_EHDR,
            'Phdr': ELF32_PHDR,
            'Shdr': ELF32_SHDR,
        }


class HeaderAccessor:
    """
    Decoded view of the headers of one ELF buffer.

    Instances are cheap, hold no copy of the data and are meant to live for a
    single load or lookup call.
    """

    def __init__(self, buf):
        self.buf = buf
        self.ident = identify(buf)
        self.byte_order = _BYTE_ORDERS[self.ident.data]
        self.layouts = get_elf_layouts(self.ident.is_64bit)
        self.header = self._read_file_header()

    def _field(self, layout: str, base: int, name: str) -> int:
        offset, width = self.layouts[layout][name]
        return read_field(self.buf, base + offset, width, self.byte_order)

    def _read_file_header(self) -> FileHeader:
        def ehdr(name):
            return self._field('Ehdr', 0, name)

        return FileHeader(
            entry=ehdr('e_entry'),
            phoff=ehdr('e_phoff'),
            phentsize=ehdr('e_phentsize'),
            phnum=ehdr('e_phnum'),
            shoff=ehdr('e_shoff'),
            shentsize=ehdr('e_shentsize'),
            shnum=ehdr('e_shnum'),
            shstrndx=ehdr('e_shstrndx'),
        )

    def file_header(self) -> FileHeader:
        return self.header

    def program_header(self, index: int) -> ProgramHeader:
        base = self.header.phoff + index * self.header.phentsize

        def phdr(name):
            return self._field('Phdr', base, name)

        return ProgramHeader(
            index=index,
            p_type=phdr('p_type'),
            p_flags=phdr('p_flags'),
            p_offset=phdr('p_offset'),
            p_vaddr=phdr('p_vaddr'),
            p_paddr=phdr('p_paddr'),
            p_filesz=phdr('p_filesz'),
            p_memsz=phdr('p_memsz'),
        )

    def section_header(self, index: int) -> SectionHeader:
        base = self.header.shoff + index * self.header.shentsize

        def shdr(name):
            return self._field('Shdr', base, name)

        return SectionHeader(
            index=index,
            sh_name=shdr('sh_name'),
            sh_type=shdr('sh_type'),
            sh_addr=shdr('sh_addr'),
            sh_offset=shdr('sh_offset'),
            sh_size=shdr('sh_size'),
        )

    def iter_program_headers(self) -> Iterator[ProgramHeader]:
        for i in range(self.header.phnum):
            yield self.program_header(i)

    def iter_section_headers(self) -> Iterator[SectionHeader]:
        for i in range(self.header.shnum):
            yield self.section_header(i)
