#!/usr/bin/env python3
"""
ELF Utilities Module
====================

This module contains utility functions shared by the loader and the
command line front end:
- ELF magic detection
- Architecture detection
- Address parsing
- Logging configuration
"""

import logging
from typing import Optional

from .types import ELF_MAGIC, EI_NIDENT, EI_CLASS, EI_VERSION, EV_CURRENT, ELFClass


# =============================================================================
# ELF魔数检测
# =============================================================================

def is_elf(buf) -> bool:
    """
    Check whether a buffer starts with a version 1 ELF identification record.

    Only the 4-byte signature and the version byte are checked; class and
    data encoding are validated later, when header fields are read.

    Args:
        buf: bytes-like object holding the candidate image

    Returns:
        True for an ELF buffer, False otherwise (including short buffers)
    """
    if len(buf) < EI_NIDENT:
        return False
    return bytes(buf[:4]) == ELF_MAGIC and buf[EI_VERSION] == EV_CURRENT


def detect_elf_architecture(buf) -> Optional[str]:
    """
    自动检测ELF数据是32位还是64位架构

    Args:
        buf: ELF file contents

    Returns:
        "32" for 32-bit, "64" for 64-bit, None for invalid ELF data
    """
    if not is_elf(buf):
        return None

    elf_class = buf[EI_CLASS]
    if elf_class == ELFClass.ELFCLASS32:
        return "32"
    elif elf_class == ELFClass.ELFCLASS64:
        return "64"
    else:
        return None


def parse_memory_address(addr_str: str) -> int:
    """Parse memory address or size from string, supporting hex and decimal formats"""
    addr_str = addr_str.strip()

    if addr_str.lower().startswith('0x'):
        return int(addr_str, 16)

    if any(c in addr_str.lower() for c in 'abcdef'):
        return int(addr_str, 16)

    return int(addr_str, 10)


def setup_logging(debug: bool):
    """Setup logging configuration"""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
        force=True
    )
