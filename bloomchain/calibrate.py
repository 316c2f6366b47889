"""Measure the empirical false positive rate of a filter.

Inserts keys 0..n-1, queries the known non-members n..2n-1 and compares the
share of positives with the configured failure rate:

    python -m bloomchain.calibrate 10000
    python -m bloomchain.calibrate 10000 --scalable --failure-rate 0.01
"""
import argparse
import logging

from bloomchain.bloom import DEFAULT_FAILURE_RATE, BloomFilter, ScalableBloomFilter

logger = logging.getLogger(__name__)


def false_positive_rate(test_size, filter_type=BloomFilter,
                        failure_rate=DEFAULT_FAILURE_RATE, echo=True):
    """Return the false positive rate of a freshly filled filter.

    Args:
        test_size (int): Capacity of the filter and number of keys inserted
            and queried.
        filter_type (type, optional): BloomFilter or ScalableBloomFilter.
        failure_rate (float, optional): Configured failure rate.
        echo (bool, optional): Print the measured and configured rates.

    Returns:
        float: false positives / test_size
    """
    bf = filter_type(test_size, failure_rate)
    for n in range(test_size):
        bf.insert(n)
    false_positives = sum(1 for n in range(test_size, test_size * 2)
                          if bf.includes(n))
    rate = false_positives / test_size
    logger.debug("%s after %d keys:\n%s", filter_type.__name__, test_size,
                 bf.describe())

    if echo:
        print("Your Bloom Filter had a false positive rate of %g%%.\n"
              "Its actual rate should have been %g%%."
              % (rate * 100, bf.failure_rate * 100))
    return rate


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Measure the false positive rate of a Bloom filter")
    parser.add_argument("test_size", type=int,
                        help="Number of keys to insert and to query")
    parser.add_argument("--scalable", action="store_true",
                        help="Measure a ScalableBloomFilter")
    parser.add_argument("--failure-rate", type=float,
                        default=DEFAULT_FAILURE_RATE,
                        help="Configured failure rate (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log filter construction and growth")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.test_size <= 0:
        parser.error("test_size must be > 0")
    if not (0 < args.failure_rate < 1):
        parser.error("--failure-rate must be between 0 and 1")

    filter_type = ScalableBloomFilter if args.scalable else BloomFilter
    false_positive_rate(args.test_size, filter_type, args.failure_rate)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
