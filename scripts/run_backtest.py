"""
Walk-forward 백테스트 실행
==========================

사용법:
    python scripts/run_backtest.py --symbol BTCUSDT --interval 4h --lookback 500
    python scripts/run_backtest.py --csv data/btc_4h.csv
"""
import argparse
import sys

from _common import load_series, setup_logging

from ta_signal.backtest import WalkForwardConfig, format_backtest_stats, run_backtest
from ta_signal.config import load_engine_config, validate_lookback
from ta_signal.errors import SignalError


def main() -> int:
    parser = argparse.ArgumentParser(description='Walk-forward backtest')
    parser.add_argument('--symbol', default='BTCUSDT')
    parser.add_argument('--interval', default=None)
    parser.add_argument('--lookback', type=int, default=None)
    parser.add_argument('--csv', default=None)
    parser.add_argument('--trades', action='store_true', help='거래 목록 출력')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    setup_logging(args.verbose)
    config = load_engine_config()
    bt = config.backtest
    interval = args.interval or config.pipeline.default_interval

    try:
        lookback = validate_lookback(args.lookback or bt.lookback, bt)
        df = load_series(config, args.csv, args.symbol, interval, lookback)
        stats = run_backtest(df, lookback, WalkForwardConfig(
            warmup_bars=bt.warmup_bars,
            entry_threshold=bt.entry_threshold,
            stop_mult=bt.stop_mult,
            target_mult=bt.target_mult,
        ))
    except SignalError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 2

    print(format_backtest_stats(stats))
    if args.trades:
        for t in stats.trade_log:
            print(f"  #{t.index:4d} {t.direction:<5} entry={t.entry:.4f} exit={t.exit:.4f} "
                  f"result={t.result:+.4f} ({t.exit_reason})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
