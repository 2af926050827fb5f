#!/usr/bin/env python3
"""
elfload安装脚本
==============

ELF镜像加载器的安装配置。
"""

from setuptools import setup, find_packages
import os

# 读取长描述
def read_long_description():
    here = os.path.abspath(os.path.dirname(__file__))
    try:
        with open(os.path.join(here, 'README.md'), 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return "elfload - ELF镜像加载器"

setup(
    name="elfload",
    version="1.0.0",
    author="",
    author_email="",
    description="ELF image loader - place PT_LOAD segments into a flat memory buffer",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",

    # 包配置
    package_dir={"": "src"},
    packages=find_packages(where="src"),

    # 依赖
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },

    # Python版本要求
    python_requires=">=3.8",

    # 分类器
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Embedded Systems",
        "Topic :: System :: Emulators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
    ],

    # 命令行入口点
    entry_points={
        "console_scripts": [
            "elfload=elfload.main:main",
        ],
    },

    # 项目关键词
    keywords="elf, loader, firmware, emulator, binary analysis",

    zip_safe=False,
)
