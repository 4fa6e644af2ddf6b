"""Dashboard refresh entry point.

Usage:
    python run_dashboard.py

Loads config.yaml, builds the DashboardEngine, refreshes every symbol on the
watchlist, prints the portfolio summary and writes a CSV snapshot.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()  # must precede stockdash imports so env vars are available at module load

from stockdash.core.config import Settings, load_config  # noqa: E402
from stockdash.core.currency import format_eur  # noqa: E402
from stockdash.core.logger import logger  # noqa: E402
from stockdash.pipeline.engine import DashboardEngine  # noqa: E402


def main() -> int:
    """Refresh the dashboard once. Returns 0 on success, 1 on failure."""
    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"run_dashboard: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    settings = Settings.from_config(config)
    output_dir = config.get("output_dir", "output")

    engine = DashboardEngine.from_settings(settings)
    try:
        for symbol in config.get("seed_symbols", []):
            if engine.store.get(symbol) is None:
                engine.store.add(symbol, symbol.upper())
        views = engine.refresh()
        summary = engine.portfolio()
        value_eur, change_eur = engine.portfolio_in_eur()
        path = engine.export_snapshot(output_dir)
    except Exception as exc:
        logger.error(f"run_dashboard: DashboardEngine raised: {exc}", exc_info=True)
        print(f"ERROR: dashboard refresh failed — {exc}", file=sys.stderr)
        return 1
    finally:
        engine.close()

    for view in views:
        signal = view.analysis.recommendation.value if view.analysis else "-"
        print(f"{view.quote.symbol:<6} {view.quote.price:>10.2f} {view.quote.change_percent:>+7.2f}%  {signal}")
    print(
        f"\n{summary.stock_count} stocks | value {format_eur(value_eur)} | "
        f"change {format_eur(change_eur)} ({summary.total_change_percent:+.2f}%)"
    )
    print(f"SUCCESS: snapshot written to {os.path.abspath(path)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
