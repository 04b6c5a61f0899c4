"""
단일 심볼 신호 생성
===================

사용법:
    python scripts/run_signal.py --symbol BTCUSDT --interval 4h
    python scripts/run_signal.py --csv data/btc_4h.csv --confirm-csv data/btc_1d.csv
"""
import argparse
import json
import sys

from _common import load_csv, make_provider, setup_logging

from ta_signal.config import load_engine_config
from ta_signal.errors import SignalError
from ta_signal.pipeline import analyze_symbol, format_signal_report, generate_signal


def main() -> int:
    parser = argparse.ArgumentParser(description='Deterministic TA signal')
    parser.add_argument('--symbol', default='BTCUSDT')
    parser.add_argument('--interval', default=None)
    parser.add_argument('--confirm-interval', default=None)
    parser.add_argument('--csv', default=None, help='primary OHLCV CSV (fetch 대신 사용)')
    parser.add_argument('--confirm-csv', default=None)
    parser.add_argument('--json', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    setup_logging(args.verbose)
    config = load_engine_config()
    interval = args.interval or config.pipeline.default_interval

    try:
        if args.csv:
            confirm = load_csv(args.confirm_csv) if args.confirm_csv else None
            report = generate_signal(load_csv(args.csv), confirm, min_bars=config.pipeline.min_bars)
        else:
            report = analyze_symbol(
                args.symbol,
                interval,
                make_provider(config),
                confirm_interval=args.confirm_interval or config.pipeline.confirm_interval,
                limit=config.pipeline.candle_limit,
                min_bars=config.pipeline.min_bars,
            )
    except SignalError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        print(format_signal_report(report))
    return 0


if __name__ == '__main__':
    sys.exit(main())
