from bloomchain.bloom import (
    DEFAULT_FAILURE_RATE,
    BloomFilter,
    BloomFilterError,
    FilterKind,
    FilterTypeMismatchError,
    IncompatibleFilterError,
    MembershipFilter,
    ScalableBloomFilter,
    required_bits,
    required_hashes,
    xxhash32,
)

__all__ = [
    "DEFAULT_FAILURE_RATE",
    "BloomFilter",
    "BloomFilterError",
    "FilterKind",
    "FilterTypeMismatchError",
    "IncompatibleFilterError",
    "MembershipFilter",
    "ScalableBloomFilter",
    "required_bits",
    "required_hashes",
    "xxhash32",
]
