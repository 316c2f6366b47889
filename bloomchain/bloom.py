"""Bloom Filter and Scalable Bloom Filter implementations.

This module implements two probabilistic data structures for space-efficient
set membership testing:

1. BloomFilter: Fixed-capacity filter for known dataset sizes
2. ScalableBloomFilter: Chain of BloomFilters that grows as it fills

Both answer "might this key have been inserted?" with no false negatives and
a bounded false positive rate. Both share the MembershipFilter capability
set (insert, includes, merge, count, describe).

Mathematical Foundation:
    - Bit count: M = round(-n × ln(P) / (ln(2)²)) where n is capacity
    - Hash count: k = ceil(ln(2) × M / n)
    - Scalable chain: member i uses P × (ln(2)²)^(i + 1), a geometric
      series whose sum stays below P

Requirements:
    - bitarray: Packed bit vector storage
    - xxhash: Fast non-cryptographic hashing
"""
import enum
import logging
import math
from abc import ABC, abstractmethod
from struct import pack

import bitarray
import xxhash

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_RATE = 0.001


class BloomFilterError(Exception):
    """Base class for errors raised by bloomchain filters."""


class IncompatibleFilterError(BloomFilterError, ValueError):
    """Raised when merging BloomFilters whose bit layouts differ."""


class FilterTypeMismatchError(BloomFilterError, TypeError):
    """Raised when merging a ScalableBloomFilter with another kind of filter."""


class FilterKind(enum.Enum):
    FIXED = 'fixed'
    SCALABLE = 'scalable'


def xxhash32(num):
    """Hash an integer to a 32-bit unsigned integer.

    The number is reduced to 64 bits and hashed as 8 little-endian bytes,
    so the result is stable across processes and platforms.

    >>> xxhash32(42) == xxhash32(42)
    True
    >>> 0 <= xxhash32(-1) < 2 ** 32
    True
    """
    return xxhash.xxh32_intdigest(pack('<Q', num & 0xFFFFFFFFFFFFFFFF))


def key_digest(key):
    """Digest an arbitrary key to an integer.

    Keys are normalised to bytes (str as UTF-8, bytes unchanged, anything
    else through str()) before hashing, so ``1`` and ``"1"`` share a digest.
    """
    if isinstance(key, str):
        key = key.encode('utf-8')
    elif not isinstance(key, bytes):
        key = str(key).encode('utf-8')
    return xxhash.xxh64_intdigest(key)


def required_bits(capacity, failure_rate):
    """Return the bit vector size for ``capacity`` keys at ``failure_rate``.

    >>> required_bits(100, 0.01)
    959
    """
    return int(round(-(capacity * math.log(failure_rate)) / (math.log(2) ** 2)))


def required_hashes(capacity, num_bits):
    """Return the number of index rounds minimising false positives.

    >>> required_hashes(100, 959)
    7
    """
    return int(math.ceil(math.log(2) * (num_bits / capacity)))


class MembershipFilter(ABC):
    """Capability set shared by BloomFilter and ScalableBloomFilter.

    Subclasses provide insert, includes, merge and describe, and expose
    ``count`` as the number of new-looking insertions. The
    Python protocol methods (``in``, ``len()``, ``repr()``) are built on
    top of them so callers can use either filter polymorphically.
    """
    kind = None

    @abstractmethod
    def insert(self, key):
        """Insert ``key``; return True if it looked new."""

    @abstractmethod
    def includes(self, key):
        """Return True if ``key`` may have been inserted."""

    @abstractmethod
    def merge(self, other):
        """Union ``other`` into this filter in place."""

    @abstractmethod
    def describe(self):
        """Return a human-readable snapshot of the filter's counters."""

    def add(self, key):
        return self.insert(key)

    def __contains__(self, key):
        return self.includes(key)

    def __len__(self):
        return self.count

    def __repr__(self):
        return self.describe()


class BloomFilter(MembershipFilter):
    kind = FilterKind.FIXED

    def __init__(self, capacity, failure_rate=DEFAULT_FAILURE_RATE, hashfn=xxhash32):
        """Initialize a Bloom filter with specified capacity and failure rate.

        Args:
            capacity (int): Number of unique insertions for which the
                failure rate holds. Must be > 0.
            failure_rate (float, optional): Target asymptotic false positive
                probability, between 0 and 1 (exclusive). Default is 0.001.
            hashfn (callable, optional): Integer hash primitive used for
                seeds and index derivation. Filters only merge when they
                share it. Default is xxhash32.

        Raises:
            ValueError: If failure_rate is not in range (0, 1).
            ValueError: If capacity is not positive.

        Example:
            >>> bf = BloomFilter(capacity=100, failure_rate=0.01)
            >>> bf.num_bits, bf.hash_count
            (959, 7)
            >>> bf.insert("test")
            True
            >>> bf.includes("test")
            True
        """
        if not (0 < failure_rate < 1):
            raise ValueError("Failure_Rate must be between 0 and 1.")
        if not capacity > 0:
            raise ValueError("Capacity must be > 0")

        self.capacity = capacity
        self.failure_rate = failure_rate
        self.hashfn = hashfn
        self.num_bits = required_bits(capacity, failure_rate)
        self.hash_count = required_hashes(capacity, self.num_bits)
        # Seeds depend only on hash_count and hashfn so equally configured
        # filters derive identical indices and can be merged.
        self.seeds = tuple(hashfn(i) for i in range(self.hash_count))
        self.count = 0
        self.bits_flipped = 0
        self.bitarray = bitarray.bitarray(self.num_bits, endian='little')
        self.bitarray.setall(False)
        logger.debug("BloomFilter created: capacity=%d failure_rate=%g "
                     "num_bits=%d hash_count=%d", capacity, failure_rate,
                     self.num_bits, self.hash_count)

    required_bits = staticmethod(required_bits)
    required_hashes = staticmethod(required_hashes)

    def _indices(self, key):
        hashfn = self.hashfn
        num_bits = self.num_bits
        hashed_key = hashfn(key_digest(key))
        for seed in self.seeds:
            yield hashfn(seed ^ hashed_key) % num_bits

    def insert(self, key):
        """Set the key's bits.

        Returns:
            bool: True if at least one bit was newly set (the key looked
                new), False if every bit was already set. False is strong
                evidence of a repeat, but other keys may have set the bits.

        >>> bf = BloomFilter(100, 0.01)
        >>> bf.insert("apple"), bf.insert("apple"), bf.count
        (True, False, 1)
        """
        bitarray = self.bitarray
        flipped = 0
        for index in self._indices(key):
            if not bitarray[index]:
                bitarray[index] = True
                flipped += 1
        if not flipped:
            return False
        self.bits_flipped += flipped
        self.count += 1
        return True

    def includes(self, key):
        bitarray = self.bitarray
        for index in self._indices(key):
            if not bitarray[index]:
                return False  # Definitely not in set
        return True  # Probably in set

    def clear(self):
        """Unset every bit and reset count and bits_flipped."""
        self.bitarray.setall(False)
        self.count = 0
        self.bits_flipped = 0

    def compatible_with(self, other):
        """Return True if ``other`` derives the same indices as this filter."""
        return (getattr(other, 'kind', None) is FilterKind.FIXED and
                other.num_bits == self.num_bits and
                other.hash_count == self.hash_count and
                other.seeds == self.seeds)

    def merge(self, other):
        """OR the bits of ``other`` into this filter.

        count and bits_flipped are left as they were; they cannot account
        for keys present in both filters.

        Raises:
            IncompatibleFilterError: If ``other`` is not a BloomFilter with
                the same num_bits, hash_count and seeds. Neither filter is
                modified.
        """
        if not self.compatible_with(other):
            raise IncompatibleFilterError(
                "Merging filters requires both filters to have the same "
                "number of bits, number of hashes and seeds")
        self.bitarray |= other.bitarray

    def copy(self):
        """Create an independent copy of this Bloom filter."""
        new_filter = BloomFilter(self.capacity, self.failure_rate, self.hashfn)
        new_filter.bitarray = self.bitarray.copy()
        new_filter.count = self.count
        new_filter.bits_flipped = self.bits_flipped
        return new_filter

    def describe(self):
        return ("Count: %d\n"
                "Number of bits: %d\n"
                "Bits flipped: %d\n"
                "Number of hashes: %d" % (self.count, self.num_bits,
                                          self.bits_flipped, self.hash_count))


class ScalableBloomFilter(MembershipFilter):
    """A chain of Bloom filters that grows as keys are inserted.

    Follows "Scalable Bloom Filters" by Almeida et al., GLOBECOM 2007. The
    last filter in the chain is active. Once it holds more than its
    capacity, a new filter is appended with:
    - Twice the capacity (SIZE_SCALE_FACTOR)
    - A failure rate tightened by FAILURE_SCALE_FACTOR per position

    Member i uses failure_rate × FAILURE_SCALE_FACTOR^(i + 1). Since
    FAILURE_SCALE_FACTOR = ln(2)² ≈ 0.48, the per-member rates form a
    geometric series whose sum stays below failure_rate.

    Class Attributes:
        SIZE_SCALE_FACTOR (int): Capacity growth between members
        FAILURE_SCALE_FACTOR (float): Failure rate tightening ratio
    """
    kind = FilterKind.SCALABLE
    SIZE_SCALE_FACTOR = 2
    FAILURE_SCALE_FACTOR = math.log(2) ** 2

    def __init__(self, initial_capacity, failure_rate=DEFAULT_FAILURE_RATE,
                 hashfn=xxhash32):
        """Initialize a Scalable Bloom Filter.

        Args:
            initial_capacity (int): Capacity of the first member filter.
            failure_rate (float, optional): Target false positive
                probability of the whole chain. Default is 0.001.
            hashfn (callable, optional): Hash primitive passed to every
                member filter. Default is xxhash32.

        Raises:
            ValueError: If failure_rate is not in range (0, 1).
            ValueError: If initial_capacity is not positive.

        Example:
            >>> sbf = ScalableBloomFilter(initial_capacity=10, failure_rate=0.01)
            >>> for i in range(11):
            ...     _ = sbf.insert(i)
            >>> [f.capacity for f in sbf.filters]
            [10, 20]
        """
        if not (0 < failure_rate < 1):
            raise ValueError("Failure_Rate must be between 0 and 1.")
        self.failure_rate = failure_rate
        self.hashfn = hashfn
        self.filters = [BloomFilter(initial_capacity,
                                    failure_rate * self.FAILURE_SCALE_FACTOR,
                                    hashfn)]

    @property
    def active_filter(self):
        return self.filters[-1]

    @property
    def count(self):
        """Total number of new-looking insertions across all members."""
        return sum(f.count for f in self.filters)

    @property
    def capacity(self):
        """Total capacity across all member filters."""
        return sum(f.capacity for f in self.filters)

    def insert(self, key):
        """Insert into the active filter, growing the chain when it fills.

        Returns:
            bool: The active filter's insert result.
        """
        current = self.active_filter
        inserted = current.insert(key)
        if inserted and current.count > current.capacity:
            self._add_filter()
        return inserted

    def _add_filter(self):
        current = self.active_filter
        new_filter = BloomFilter(
            current.capacity * self.SIZE_SCALE_FACTOR,
            self.failure_rate * (self.FAILURE_SCALE_FACTOR ** (len(self.filters) + 1)),
            self.hashfn)
        self.filters.append(new_filter)
        logger.debug("ScalableBloomFilter grew to %d filters: capacity=%d "
                     "failure_rate=%g", len(self.filters), new_filter.capacity,
                     new_filter.failure_rate)

    def includes(self, key):
        for f in reversed(self.filters):
            if f.includes(key):
                return True
        return False

    def merge(self, other):
        """Prepend copies of ``other``'s member filters to this chain.

        ``other``'s members keep their oldest-first order ahead of this
        chain's members, and the active filter does not change. Members are
        not checked against each other: a query ORs over every member, so
        no false negatives are introduced, and the chain's false positive
        bound becomes the sum of both chains' bounds.

        Raises:
            FilterTypeMismatchError: If ``other`` is not a
                ScalableBloomFilter.
        """
        if getattr(other, 'kind', None) is not FilterKind.SCALABLE:
            raise FilterTypeMismatchError(
                "Merging requires both filters to be scalable bloom filters")
        if other.failure_rate != self.failure_rate:
            logger.warning("Merging scalable bloom filters with different "
                           "failure rates (%g and %g)", self.failure_rate,
                           other.failure_rate)
        self.filters[:0] = [f.copy() for f in other.filters]

    def describe(self):
        lines = ["Filters: %d" % len(self.filters),
                 "Count: %d" % self.count,
                 "Capacity: %d" % self.capacity]
        for i, f in enumerate(self.filters):
            lines.append("Filter %d (capacity %d, failure rate %g):"
                         % (i, f.capacity, f.failure_rate))
            lines.extend("  " + line for line in f.describe().splitlines())
        return "\n".join(lines)


if __name__ == "__main__":
    import doctest

    doctest.testmod()
