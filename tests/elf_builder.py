"""
In-memory ELF image builder used by the tests.

Images are laid out as: file header, program header table, segment data,
section name string table, section header table. The string table is
section 1 so that truncating the image only damages the trailing section
headers.
"""

import struct
from dataclasses import dataclass
from typing import List, Optional

PT_LOAD = 1
PT_NOTE = 4
SHT_PROGBITS = 1
SHT_STRTAB = 3

# (is_64bit, big_endian)
ELF_VARIANTS = [(False, False), (False, True), (True, False), (True, True)]
ELF_VARIANT_IDS = ['elf32-le', 'elf32-be', 'elf64-le', 'elf64-be']


@dataclass
class Segment:
    paddr: int
    data: bytes = b''
    memsz: Optional[int] = None
    p_type: int = PT_LOAD
    offset: Optional[int] = None    # override p_offset, data is then not emitted
    filesz: Optional[int] = None    # override p_filesz
    vaddr: Optional[int] = None
    flags: int = 5


@dataclass
class Section:
    name: str
    addr: int = 0
    size: int = 0
    name_index: Optional[int] = None  # override sh_name


def build_elf(segments: List[Segment] = (), sections: Optional[List[Section]] = None,
              is_64bit: bool = True, big_endian: bool = False, version: int = 1,
              elf_class: Optional[int] = None, data_encoding: Optional[int] = None,
              shstrndx: Optional[int] = None, strtab_size: Optional[int] = None,
              entry: int = 0) -> bytes:
    bo = '>' if big_endian else '<'
    ehsize = 64 if is_64bit else 52
    phentsize = 56 if is_64bit else 32
    shentsize = 64 if is_64bit else 40

    phoff = ehsize if segments else 0
    cursor = ehsize + phentsize * len(segments)

    body = bytearray()
    phdrs = bytearray()
    for seg in segments:
        if seg.offset is None:
            offset = cursor + len(body)
            body += seg.data
        else:
            offset = seg.offset
        filesz = len(seg.data) if seg.filesz is None else seg.filesz
        memsz = filesz if seg.memsz is None else seg.memsz
        vaddr = seg.paddr if seg.vaddr is None else seg.vaddr

        if is_64bit:
            phdrs += struct.pack(bo + 'IIQQQQQQ', seg.p_type, seg.flags, offset,
                                 vaddr, seg.paddr, filesz, memsz, 0x1000)
        else:
            phdrs += struct.pack(bo + 'IIIIIIII', seg.p_type, offset, vaddr,
                                 seg.paddr, filesz, memsz, seg.flags, 0x1000)

    shoff = 0
    shnum = 0
    shdrs = bytearray()
    strtab_index = 0
    if sections is not None:
        strtab = bytearray(b'\0.shstrtab\0')
        name_indices = []
        for section in sections:
            name_indices.append(len(strtab))
            strtab += section.name.encode() + b'\0'

        strtab_offset = cursor + len(body)
        body += strtab

        def shdr(name, sh_type, addr, offset, size):
            if is_64bit:
                return struct.pack(bo + 'IIQQQQIIQQ', name, sh_type, 0, addr,
                                   offset, size, 0, 0, 1, 0)
            return struct.pack(bo + 'IIIIIIIIII', name, sh_type, 0, addr,
                               offset, size, 0, 0, 1, 0)

        shdrs += bytes(shentsize)
        shdrs += shdr(1, SHT_STRTAB, 0, strtab_offset,
                      len(strtab) if strtab_size is None else strtab_size)
        for section, name_index in zip(sections, name_indices):
            if section.name_index is not None:
                name_index = section.name_index
            shdrs += shdr(name_index, SHT_PROGBITS, section.addr, 0, section.size)

        shoff = cursor + len(body)
        shnum = len(sections) + 2
        strtab_index = 1

    if shstrndx is None:
        shstrndx = strtab_index

    ident = b'\x7fELF' + bytes([
        (2 if is_64bit else 1) if elf_class is None else elf_class,
        (2 if big_endian else 1) if data_encoding is None else data_encoding,
        version,
        0,
    ]) + bytes(8)

    if is_64bit:
        ehdr = struct.pack(bo + '16sHHIQQQIHHHHHH', ident, 2, 0xf3, 1, entry,
                           phoff, shoff, 0, ehsize, phentsize, len(segments),
                           shentsize, shnum, shstrndx)
    else:
        ehdr = struct.pack(bo + '16sHHIIIIIHHHHHH', ident, 2, 0xf3, 1, entry,
                           phoff, shoff, 0, ehsize, phentsize, len(segments),
                           shentsize, shnum, shstrndx)

    return bytes(ehdr + phdrs + body + shdrs)
