import os
import sys

import pytest

# 添加src目录到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from elf_builder import ELF_VARIANTS, ELF_VARIANT_IDS


@pytest.fixture(params=ELF_VARIANTS, ids=ELF_VARIANT_IDS)
def variant(request):
    """(is_64bit, big_endian) for each of the four ELF layouts"""
    return request.param
