#!/usr/bin/env python3
"""Setup script for bloomchain - Bloom filters and scalable Bloom filter chains."""
from setuptools import setup

VERSION = "1.0.0"
DESCRIPTION = "Bloom filter: A Probabilistic data structure"
LONG_DESCRIPTION = """
A Bloom filter and a scalable chain of Bloom filters backed by packed bit
arrays and xxHash.

This module provides two implementations:
- BloomFilter: Fixed-capacity filter for known dataset sizes
- ScalableBloomFilter: Chain of filters that grows as it fills, doubling
  capacity and tightening the failure rate by ln(2)^2 per member

Features:
- Deterministic seeds, so equally configured filters can be merged
- Injectable integer hash primitive (xxHash32 by default)
- Space-efficient bit array storage
- In-place merge of filters and of filter chains
- Calibration tool: python -m bloomchain.calibrate
"""

CLASSIFIERS = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.8",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3 :: Only",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Utilities",
]

setup(
    name="bloomchain",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/plain",
    classifiers=CLASSIFIERS,
    keywords=[
        "bloom filter",
        "probabilistic",
        "data structures",
        "set membership",
        "scalable",
        "xxhash",
    ],
    license="MIT License",
    platforms=["any"],
    python_requires=">=3.8",
    install_requires=["bitarray>=2.0.0", "xxhash>=3.0.0"],
    extras_require={"test": ["pytest>=7.0"]},
    packages=["bloomchain"],
    zip_safe=True,
)
