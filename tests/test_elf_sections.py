import pytest

from elfload.elf_sections import find_section, section_names
from elfload.exceptions import (MalformedSectionTableError, MalformedStringTableError,
                                NotELFError, SectionLookupError)
from elfload.types import SectionInfo
from elf_builder import Section, Segment, build_elf

SECTIONS = [
    Section('.text', 0x80000000, 0x1200),
    Section('.data', 0x80002000, 0x300),
    Section('.cmdline', 0x80003000, 0x40),
]


def test_find_section_all_layouts(variant):
    is_64bit, big_endian = variant
    image = build_elf([Segment(0x80000000, b'code')], sections=SECTIONS,
                      is_64bit=is_64bit, big_endian=big_endian)

    assert find_section(image, '.text') == SectionInfo(0x80000000, 0x1200)
    assert find_section(image, '.cmdline') == SectionInfo(0x80003000, 0x40)
    assert find_section(image, '.shstrtab') is not None


def test_find_section_missing_name():
    image = build_elf([], sections=SECTIONS)
    assert find_section(image, '.bss') is None
    assert find_section(image, '.tex') is None
    assert find_section(image, '.text.startup') is None


def test_find_section_accepts_bytes():
    image = build_elf([], sections=SECTIONS)
    assert find_section(image, b'.data') == SectionInfo(0x80002000, 0x300)


def test_first_match_wins():
    image = build_elf([], sections=[Section('.dtb', 0x1000, 0x10),
                                    Section('.dtb', 0x2000, 0x20)])
    assert find_section(image, '.dtb') == SectionInfo(0x1000, 0x10)


def test_shared_name_suffix():
    # sh_name may point into the middle of another name
    image = build_elf([], sections=[Section('.rel.text', 0x1000, 0x10),
                                    Section('.text', 0x2000, 0x20, name_index=len(b'\0.shstrtab\0.rel'))])
    assert find_section(image, '.text') == SectionInfo(0x2000, 0x20)


def test_no_string_table_index():
    image = build_elf([], sections=SECTIONS, shstrndx=0)
    assert find_section(image, '.text') is None
    assert section_names(image) == []


def test_no_section_headers():
    assert find_section(build_elf([Segment(0x1000, b'code')]), '.text') is None


def test_empty_string_table():
    image = build_elf([], sections=SECTIONS, strtab_size=0)
    assert find_section(image, '.text') is None


def test_string_table_index_out_of_range():
    image = build_elf([], sections=SECTIONS, shstrndx=17)
    with pytest.raises(MalformedStringTableError):
        find_section(image, '.text')


def test_string_table_beyond_input():
    image = build_elf([], sections=SECTIONS, strtab_size=0x10000)
    with pytest.raises(MalformedStringTableError):
        find_section(image, '.text')


def test_bad_name_index_never_matches():
    image = build_elf([], sections=[Section('.text', 0x1000, 0x10, name_index=0x10000)])
    assert find_section(image, '.text') is None


def test_bad_entry_followed_by_match():
    image = build_elf([], sections=[Section('.junk', 0x1000, 0x10, name_index=0x10000),
                                    Section('.text', 0x2000, 0x20)])
    assert find_section(image, '.text') == SectionInfo(0x2000, 0x20)
    assert section_names(image) == ['', '.shstrtab', '.text']


def test_name_past_string_table_size():
    # names only have to lie inside the input, not inside sh_size
    image = build_elf([], sections=[Section('.text', 0x1000, 0x10), Section('.data', 0x2000, 0x20)],
                      strtab_size=len(b'\0.shstrtab\0'))
    assert find_section(image, '.text') == SectionInfo(0x1000, 0x10)
    assert find_section(image, '.data') == SectionInfo(0x2000, 0x20)


def test_zero_section_count():
    image = build_elf([Segment(0x1000, b'code')], shstrndx=1)
    assert find_section(image, '.text') is None
    assert section_names(image) == []


def test_truncated_file_header():
    image = build_elf([], sections=SECTIONS)
    with pytest.raises(NotELFError):
        find_section(image[:40], '.text')


def test_truncated_section_header_table():
    image = build_elf([], sections=SECTIONS, is_64bit=False)
    with pytest.raises(MalformedSectionTableError):
        find_section(image[:-20], '.cmdline')

    # matches before the damaged entry are still found
    assert find_section(image[:-20], '.text') == SectionInfo(0x80000000, 0x1200)


def test_not_elf():
    with pytest.raises(NotELFError):
        find_section(b'\0' * 64, '.text')

    with pytest.raises(SectionLookupError):
        find_section(b'\x7fELF', '.text')


def test_section_names():
    image = build_elf([], sections=SECTIONS, big_endian=True)
    assert section_names(image) == ['', '.shstrtab', '.text', '.data', '.cmdline']
