#!/usr/bin/env python3
"""
ELF Segment Loader
==================

Places the PT_LOAD segments of an ELF image into a flat, caller-owned buffer.

Placement is relative to the lowest physical address among the loadable
segments (the load base): a segment with physical address ``paddr`` lands at
``paddr - base`` in the output buffer.

Two layers live here:
- load / plan_load / required_size: pure functions over caller buffers. They
  never allocate the output, never log, and report failures by raising
  LoadError subclasses.
- ELFImageLoader: file-based front end that reads (and inflates) an image,
  allocates the output buffer, logs progress and returns True/False.
"""

import logging
import mmap
import os
from typing import List, Optional, Tuple

from .compress import decompress, detect_compression
from .elf_header import HeaderAccessor
from .elf_sections import find_section
from .exceptions import *
from .types import *
from .utils import detect_elf_architecture, is_elf

logger = logging.getLogger(__name__)

DEFAULT_MAX_INFLATE = 64 * 1024 * 1024


# =============================================================================
# 段加载核心函数
# =============================================================================

def plan_load(buf) -> Tuple[int, List[SegmentPlacement]]:
    """
    Compute the load base and the placement of every PT_LOAD segment.

    Each segment's file range is checked against the input length here, so a
    successful plan only has output-side bounds left to check.

    Args:
        buf: ELF image (bytes-like)

    Returns:
        (base_address, placements) with placements in program header order

    Raises:
        NotELFError: buf is not an ELF image
        NoLoadableSegmentsError: the image has no PT_LOAD segment
        InputOverflowError: a header or segment lies outside buf
    """
    try:
        accessor = HeaderAccessor(buf)
        segments = [phdr for phdr in accessor.iter_program_headers() if phdr.is_load]
    except TruncatedFieldError as e:
        raise InputOverflowError(str(e), e.offset, e.size, e.limit) from e

    if not segments:
        raise NoLoadableSegmentsError("No loadable segments found")

    base_address = min(phdr.p_paddr for phdr in segments)

    placements = []
    for phdr in segments:
        if phdr.p_offset + phdr.p_filesz > len(buf):
            raise InputOverflowError(
                f"Segment {phdr.index} (file 0x{phdr.p_offset:x}+0x{phdr.p_filesz:x}) "
                f"extends beyond the 0x{len(buf):x} byte input",
                phdr.p_offset, phdr.p_filesz, len(buf))

        placements.append(SegmentPlacement(
            index=phdr.index,
            file_offset=phdr.p_offset,
            dest_offset=phdr.p_paddr - base_address,
            file_size=phdr.p_filesz,
            memory_size=phdr.p_memsz,
        ))

    return base_address, placements


def required_size(buf) -> int:
    """Smallest output buffer length that load() accepts for buf"""
    _, placements = plan_load(buf)
    return max(p.dest_end for p in placements)


def load(buf, output, zero_fill: bool = True) -> LoadResult:
    """
    Copy all PT_LOAD segments of an ELF image into output.

    Every segment is validated against both buffers before the first byte is
    written, so on error the output buffer is left untouched.

    The ``memsz - filesz`` tail of each segment is zero-filled when zero_fill
    is set. With zero_fill=False only file bytes are copied and the caller must
    hand in a zero-initialized buffer to get a clean BSS.

    Args:
        buf: ELF image (bytes-like)
        output: writable byte buffer (bytearray, memoryview, mmap...)
        zero_fill: zero the memory-only tail of each segment

    Returns:
        LoadResult(base, size); size covers memsz of every segment

    Raises:
        NotELFError, NoLoadableSegmentsError, InputOverflowError,
        OutputOverflowError
    """
    base_address, placements = plan_load(buf)

    with memoryview(output) as dst, memoryview(buf) as src:
        if dst.readonly or dst.itemsize != 1:
            raise TypeError("output must be a writable byte buffer")

        for p in placements:
            if p.dest_end > len(dst):
                raise OutputOverflowError(
                    f"Segment {p.index} (dest 0x{p.dest_offset:x}-0x{p.dest_end:x}) "
                    f"does not fit the 0x{len(dst):x} byte output buffer",
                    p.dest_offset, p.dest_end - p.dest_offset, len(dst))

        image_size = 0
        for p in placements:
            dst[p.dest_offset:p.dest_offset + p.file_size] = \
                src[p.file_offset:p.file_offset + p.file_size]

            if zero_fill and p.memory_size > p.file_size:
                dst[p.dest_offset + p.file_size:p.dest_offset + p.memory_size] = \
                    bytes(p.memory_size - p.file_size)

            image_size = max(image_size, p.dest_offset + p.memory_size)

    return LoadResult(base_address, image_size)


# =============================================================================
# 基于文件的ELF镜像加载器
# =============================================================================

class ELFImageLoader:
    """
    File-based ELF image loader.

    Reads an image from disk (memory mapped), inflates it when it is gzip or
    raw-deflate compressed, then loads it into a freshly allocated buffer.
    """

    def __init__(self, file_path: str, max_inflate: int = DEFAULT_MAX_INFLATE):
        """
        Args:
            file_path: path of the (possibly compressed) ELF image
            max_inflate: largest accepted size of an inflated image
        """
        self.file_path = file_path
        self.max_inflate = max_inflate
        self.file_size = 0
        self.file_handle = None
        self.mmap_file = None
        self.data = None
        self.is_64bit = False
        self.base = None
        self.image_size = 0
        self.image = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def open(self) -> bool:
        """
        Open and map the image file, inflating it if needed

        Returns:
            True when the file holds an ELF image
        """
        try:
            self.file_size = os.path.getsize(self.file_path)
            if self.file_size == 0:
                logger.error(f"File is empty: {self.file_path}")
                return False

            self.file_handle = open(self.file_path, 'rb')
            self.mmap_file = mmap.mmap(self.file_handle.fileno(), 0, access=mmap.ACCESS_READ)
        except (IOError, OSError, ValueError) as e:
            logger.error(f"Failed to open file {self.file_path}: {e}")
            self.close()
            return False

        self.data = self.mmap_file
        algorithm = detect_compression(self.mmap_file)
        if algorithm is not None:
            try:
                self.data = decompress(self.mmap_file, self.max_inflate)
            except DecompressionError as e:
                logger.error(f"Failed to inflate {algorithm} image {self.file_path}: {e}")
                return False
            logger.info(f"Inflated {algorithm} image: {self.file_size} -> {len(self.data)} bytes")

        arch = detect_elf_architecture(self.data)
        if arch is None:
            if is_elf(self.data):
                logger.error(f"Unsupported ELF class in {self.file_path}")
            else:
                logger.error(f"Not a valid ELF file: {self.file_path}")
            return False

        self.is_64bit = (arch == "64")
        logger.info(f"Opened ELF file: {self.file_path} "
                    f"({'64-bit' if self.is_64bit else '32-bit'}, {len(self.data)} bytes)")
        return True

    def close(self):
        """关闭文件句柄和内存映射"""
        self.data = None
        if self.mmap_file:
            self.mmap_file.close()
            self.mmap_file = None
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def load(self, memory_size: Optional[int] = None, zero_fill: bool = True) -> bool:
        """
        Load the image into a new buffer of memory_size bytes.

        Args:
            memory_size: output buffer size, defaults to the size the image needs
            zero_fill: zero the memory-only tail of each segment

        Returns:
            True on success; base, image_size and image are set
        """
        if self.data is None and not self.open():
            return False

        try:
            if memory_size is None:
                memory_size = required_size(self.data)
            image = bytearray(memory_size)

            result = load(self.data, image, zero_fill=zero_fill)
        except LoadError as e:
            logger.error(f"Failed to load {self.file_path}: {e}")
            return False

        self.base = result.base
        self.image_size = result.size
        self.image = image
        logger.info(f"Loaded {'64-bit' if self.is_64bit else '32-bit'} image: "
                    f"base=0x{self.base:x}, size=0x{self.image_size:x} "
                    f"(buffer 0x{memory_size:x} bytes)")
        return True

    def find_section(self, name: str) -> Optional[SectionInfo]:
        """Resolve a named section of the original file, or None"""
        if self.data is None and not self.open():
            return None

        try:
            section = find_section(self.data, name)
        except SectionLookupError as e:
            logger.error(f"Section lookup for {name!r} failed: {e}")
            return None

        if section is None:
            logger.debug(f"Section {name!r} not found")
        return section

    def list_program_headers(self) -> None:
        """
        列出所有程序头的详细信息，用于调试
        """
        if self.data is None and not self.open():
            return

        try:
            program_headers = list(HeaderAccessor(self.data).iter_program_headers())
        except ELFError as e:
            logger.error(f"Failed to read program headers: {e}")
            return

        if not program_headers:
            print("No program headers available")
            return

        print("=" * 80)
        print("PROGRAM HEADERS:")
        print("=" * 80)
        print(f"{'Index':<5} {'Type':<12} {'VAddr':<12} {'PAddr':<12} {'Offset':<12} {'FileSz':<12} {'MemSz':<12} {'Flags':<8}")
        print("-" * 80)

        for phdr in program_headers:
            try:
                type_name = SegmentType(phdr.p_type).name[3:]
            except ValueError:
                type_name = f"0x{phdr.p_type:x}"

            flags = ""
            if phdr.p_flags & SegmentFlags.PF_R: flags += "R"
            if phdr.p_flags & SegmentFlags.PF_W: flags += "W"
            if phdr.p_flags & SegmentFlags.PF_X: flags += "X"

            print(f"{phdr.index:<5} {type_name:<12} 0x{phdr.p_vaddr:<10x} 0x{phdr.p_paddr:<10x} "
                  f"0x{phdr.p_offset:<10x} 0x{phdr.p_filesz:<10x} 0x{phdr.p_memsz:<10x} {flags:<8}")

        print("=" * 80)
