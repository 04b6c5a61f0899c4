"""
멀티 심볼 스캔
==============

사용법:
    python scripts/scan_market.py --interval 4h BTCUSDT ETHUSDT SOLUSDT
"""
import argparse
import sys

from _common import make_provider, setup_logging

from ta_signal.config import load_engine_config
from ta_signal.pipeline import format_scan_result, scan_symbols


def main() -> int:
    parser = argparse.ArgumentParser(description='Scan symbols for strongest signals')
    parser.add_argument('symbols', nargs='+')
    parser.add_argument('--interval', default=None)
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    setup_logging(args.verbose)
    config = load_engine_config()
    scan = config.scan

    result = scan_symbols(
        [s.upper() for s in args.symbols][:scan.max_symbols],
        make_provider(config),
        args.interval or config.pipeline.default_interval,
        max_workers=scan.max_workers,
        limit=scan.candle_limit,
        top_n=scan.top_n,
        min_bars=config.pipeline.min_bars,
        sentiment_confidence=scan.sentiment_confidence,
    )
    print(format_scan_result(result))
    for sym, reason in result.skipped.items():
        print(f"[SKIP] {sym}: {reason}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
