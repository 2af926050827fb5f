#!/usr/bin/env python3
"""
elfload command line front end
==============================

Loads the PT_LOAD segments of a (possibly gzip/deflate compressed) ELF image
into a flat memory image, and resolves named sections of the original file.

CLI Usage:
    elfload -i kernel.elf -o kernel.bin
    elfload -i bbl.elf.gz -o ram.bin -m 0x8000000 -s .cmdline -d

Module Usage:
    import elfload

    with open('kernel.elf', 'rb') as f:
        data = f.read()

    ram = bytearray(elfload.required_size(data))
    result = elfload.load(data, ram)
    print(hex(result.base), hex(result.size))

    dtb = elfload.find_section(data, '.dtb')
"""

import sys
import os
import argparse
import logging

from .utils import setup_logging, parse_memory_address
from .elf_loader import ELFImageLoader, DEFAULT_MAX_INFLATE

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='elfload - Load ELF segments into a flat memory image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load an image into a buffer sized to fit it
  elfload -i kernel.elf -o kernel.bin

  # Fixed 128 MiB RAM, compressed input, look up the .cmdline section
  elfload -i bbl.elf.gz -o ram.bin -m 0x8000000 -s .cmdline
        """
    )

    parser.add_argument('-i', '--input', required=True,
                        help='ELF image path (plain, gzip or raw deflate)')
    parser.add_argument('-o', '--output',
                        help='Output path for the flat memory image')
    parser.add_argument('-m', '--memory-size',
                        help='Output buffer size (hex or decimal, default: size the image needs)')
    parser.add_argument('-s', '--section', action='append', default=[],
                        help='Section name to resolve (may be repeated)')
    parser.add_argument('-l', '--list', action='store_true',
                        help='Print the program header table')
    parser.add_argument('--no-zero-fill', action='store_true',
                        help='Do not zero the memsz - filesz tail of segments')
    parser.add_argument('--max-inflate', default=str(DEFAULT_MAX_INFLATE),
                        help='Largest accepted inflated image size (hex or decimal)')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Enable debug output')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the elfload command"""
    args = parse_args(argv)

    setup_logging(args.debug)

    if not os.path.isfile(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        memory_size = parse_memory_address(args.memory_size) if args.memory_size else None
        max_inflate = parse_memory_address(args.max_inflate)
    except ValueError as e:
        logger.error(f"Invalid size: {e}")
        return 1

    if (memory_size is not None and memory_size <= 0) or max_inflate <= 0:
        logger.error("Sizes must be positive")
        return 1

    with ELFImageLoader(args.input, max_inflate=max_inflate) as loader:
        if not loader.open():
            return 1

        if args.list:
            loader.list_program_headers()

        if not loader.load(memory_size, zero_fill=not args.no_zero_fill):
            return 1

        print(f"ELF{64 if loader.is_64bit else 32} base=0x{loader.base:x} size=0x{loader.image_size:x}")

        status = 0
        for name in args.section:
            section = loader.find_section(name)
            if section is None:
                print(f"{name}: not found")
                status = 1
            else:
                print(f"{name}: addr=0x{section.addr:x} size=0x{section.size:x}")

        if args.output:
            try:
                with open(args.output, 'wb') as f:
                    f.write(loader.image)
            except (IOError, OSError) as e:
                logger.error(f"Failed to write output file {args.output}: {e}")
                return 1
            logger.info(f"Wrote {len(loader.image)} bytes to {args.output}")

    return status


if __name__ == '__main__':
    sys.exit(main())
