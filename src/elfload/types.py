from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

# =============================================================================
# ELF Constants and Enums
# =============================================================================

ELF_MAGIC = b'\x7fELF'
EI_NIDENT = 16          # Size of the identification record
EI_CLASS = 4            # File class byte index
EI_DATA = 5             # Data encoding byte index
EI_VERSION = 6          # File version byte index
EV_CURRENT = 1


class ELFClass(IntEnum):
    """ELF file class constants"""
    ELFCLASSNONE = 0
    ELFCLASS32 = 1
    ELFCLASS64 = 2


class ELFData(IntEnum):
    """ELF data encoding constants"""
    ELFDATANONE = 0
    ELFDATA2LSB = 1  # Little endian
    ELFDATA2MSB = 2  # Big endian


class SegmentType(IntEnum):
    """Program header segment type constants"""
    PT_NULL = 0
    PT_LOAD = 1
    PT_DYNAMIC = 2
    PT_INTERP = 3
    PT_NOTE = 4
    PT_SHLIB = 5
    PT_PHDR = 6
    PT_TLS = 7


class SectionType(IntEnum):
    """Section header type constants"""
    SHT_NULL = 0
    SHT_PROGBITS = 1
    SHT_SYMTAB = 2
    SHT_STRTAB = 3
    SHT_RELA = 4
    SHT_HASH = 5
    SHT_DYNAMIC = 6
    SHT_NOTE = 7
    SHT_NOBITS = 8
    SHT_REL = 9


class SegmentFlags(IntEnum):
    """Program header segment flags"""
    PF_X = 1  # Execute
    PF_W = 2  # Write
    PF_R = 4  # Read


# =============================================================================
# Field Layouts (matching elf.h, as (byte offset, width) pairs)
# =============================================================================

FieldLayout = Dict[str, Tuple[int, int]]

ELF32_EHDR: FieldLayout = {
    'e_type': (16, 2),       # Object file type
    'e_machine': (18, 2),    # Architecture
    'e_version': (20, 4),    # Object file version
    'e_entry': (24, 4),      # Entry point virtual address
    'e_phoff': (28, 4),      # Program header table file offset
    'e_shoff': (32, 4),      # Section header table file offset
    'e_flags': (36, 4),      # Processor-specific flags
    'e_ehsize': (40, 2),     # ELF header size in bytes
    'e_phentsize': (42, 2),  # Program header table entry size
    'e_phnum': (44, 2),      # Program header table entry count
    'e_shentsize': (46, 2),  # Section header table entry size
    'e_shnum': (48, 2),      # Section header table entry count
    'e_shstrndx': (50, 2),   # Section header string table index
}

ELF64_EHDR: FieldLayout = {
    'e_type': (16, 2),
    'e_machine': (18, 2),
    'e_version': (20, 4),
    'e_entry': (24, 8),
    'e_phoff': (32, 8),
    'e_shoff': (40, 8),
    'e_flags': (48, 4),
    'e_ehsize': (52, 2),
    'e_phentsize': (54, 2),
    'e_phnum': (56, 2),
    'e_shentsize': (58, 2),
    'e_shnum': (60, 2),
    'e_shstrndx': (62, 2),
}

ELF32_PHDR: FieldLayout = {
    'p_type': (0, 4),     # Segment type
    'p_offset': (4, 4),   # Segment file offset
    'p_vaddr': (8, 4),    # Segment virtual address
    'p_paddr': (12, 4),   # Segment physical address
    'p_filesz': (16, 4),  # Segment size in file
    'p_memsz': (20, 4),   # Segment size in memory
    'p_flags': (24, 4),   # Segment flags
    'p_align': (28, 4),   # Segment alignment
}

ELF64_PHDR: FieldLayout = {
    'p_type': (0, 4),
    'p_flags': (4, 4),
    'p_offset': (8, 8),
    'p_vaddr': (16, 8),
    'p_paddr': (24, 8),
    'p_filesz': (32, 8),
    'p_memsz': (40, 8),
    'p_align': (48, 8),
}

ELF32_SHDR: FieldLayout = {
    'sh_name': (0, 4),       # Section name (string table index)
    'sh_type': (4, 4),       # Section type
    'sh_flags': (8, 4),      # Section flags
    'sh_addr': (12, 4),      # Section virtual addr at execution
    'sh_offset': (16, 4),    # Section file offset
    'sh_size': (20, 4),      # Section size in bytes
    'sh_link': (24, 4),      # Link to another section
    'sh_info': (28, 4),      # Additional section information
    'sh_addralign': (32, 4), # Section alignment
    'sh_entsize': (36, 4),   # Entry size if section holds table
}

ELF64_SHDR: FieldLayout = {
    'sh_name': (0, 4),
    'sh_type': (4, 4),
    'sh_flags': (8, 8),
    'sh_addr': (16, 8),
    'sh_offset': (24, 8),
    'sh_size': (32, 8),
    'sh_link': (40, 4),
    'sh_info': (44, 4),
    'sh_addralign': (48, 8),
    'sh_entsize': (56, 8),
}


# =============================================================================
# Decoded Header Records
# =============================================================================

@dataclass(frozen=True)
class ELFIdent:
    """Identification record (first EI_NIDENT bytes of the file)"""
    elf_class: ELFClass
    data: ELFData
    version: int

    @property
    def is_64bit(self) -> bool:
        return self.elf_class == ELFClass.ELFCLASS64

    @property
    def is_big_endian(self) -> bool:
        return self.data == ELFData.ELFDATA2MSB


@dataclass(frozen=True)
class FileHeader:
    entry: int
    phoff: int
    phentsize: int
    phnum: int
    shoff: int
    shentsize: int
    shnum: int
    shstrndx: int


@dataclass(frozen=True)
class ProgramHeader:
    index: int
    p_type: int
    p_flags: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesz: int
    p_memsz: int

    @property
    def is_load(self) -> bool:
        return self.p_type == SegmentType.PT_LOAD


@dataclass(frozen=True)
class SectionHeader:
    index: int
    sh_name: int
    sh_type: int
    sh_addr: int
    sh_offset: int
    sh_size: int


# =============================================================================
# Loader Results
# =============================================================================

@dataclass(frozen=True)
class SegmentPlacement:
    """Where one PT_LOAD segment lands in the output buffer"""
    index: int
    file_offset: int
    dest_offset: int
    file_size: int
    memory_size: int

    @property
    def dest_end(self) -> int:
        return self.dest_offset + max(self.file_size, self.memory_size)


@dataclass(frozen=True)
class LoadResult:
    base: int
    size: int


@dataclass(frozen=True)
class SectionInfo:
    addr: int
    size: int
