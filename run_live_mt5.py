"""
SmartOB Live / Dry-Run Loop

Drives the StrategyOrchestrator from either a MetaTrader 5 terminal (live)
or CSV files replayed bar by bar (dry-run).

Usage (from repo root):
    python run_live_mt5.py --mode dry-run --csv-dir infra/data
    python run_live_mt5.py --mode live --poll-seconds 10

Dry-run expects ``{SYMBOL}_{TF}.csv`` files for every tracked symbol and
each of the entry and trend timeframes.
"""

import sys
import os
import argparse
import json
import logging
import time
from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Dict, List, Optional

# Force UTF-8 encoding on Windows
try:
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")
except AttributeError:
    pass
os.environ.setdefault("PYTHONIOENCODING", "utf-8")

from configs import config_loader
from core.execution.mt5_executor import MT5Executor, ExecutionMode, StaticAccount
from core.models.config import StrategyConfig
from core.orchestration.pipeline import StrategyOrchestrator
from infra.broker.mt5_connector import MT5Connector
from infra.data.data_loader import CsvMarketData

logger = logging.getLogger(__name__)

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per log record, extra fields included."""

    def format(self, record):
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_obj[key] = value
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


def setup_logging(log_dir: str = "logs") -> Path:
    """JSON logging to a timestamped file plus a plain console handler."""
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    log_file = path / f"smartob_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}.json"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    return log_file


def run_dry_run(config: StrategyConfig, system: Dict, csv_dir: str) -> StrategyOrchestrator:
    """Replay CSV history through the orchestrator, one entry bar at a time."""
    market_data = CsvMarketData(csv_dir, system.get("symbols_meta", {}))
    executor = MT5Executor(ExecutionMode.DRY_RUN, system.get("mt5", {}))
    account = StaticAccount(system.get("equity", 10000.0))
    orchestrator = StrategyOrchestrator(config, market_data, account, executor)

    timer_every = timedelta(seconds=config.timer_seconds)
    next_timer: Optional[datetime] = None
    try:
        for close_time in market_data.replay_times(orchestrator.primary_symbol, config.entry_timeframe):
            market_data.advance_to(close_time)
            if next_timer is None or close_time >= next_timer:
                orchestrator.on_timer(close_time)
                next_timer = close_time + timer_every
            orchestrator.on_tick(close_time)
    finally:
        orchestrator.shutdown()
        executor.log_dry_run_summary()
    return orchestrator


def run_live(config: StrategyConfig, system: Dict, poll_seconds: int) -> Optional[StrategyOrchestrator]:
    """Poll the MT5 terminal until interrupted."""
    connector = MT5Connector(system.get("mt5", {}))
    if not connector.login():
        logger.error("mt5_unavailable")
        return None

    executor = MT5Executor(ExecutionMode.LIVE, system.get("mt5", {}), mt5=connector.mt5)
    orchestrator = StrategyOrchestrator(config, connector, connector, executor)

    next_timer = datetime.now(timezone.utc)
    try:
        while True:
            now = datetime.now(timezone.utc)
            if now >= next_timer:
                orchestrator.on_timer(now)
                next_timer = now + timedelta(seconds=config.timer_seconds)
            orchestrator.on_tick(now)
            time.sleep(max(poll_seconds, 1))
    except KeyboardInterrupt:
        logger.info("live_loop_interrupted")
    finally:
        orchestrator.shutdown()
        connector.logout()
    return orchestrator


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SmartOB order block strategy loop")
    parser.add_argument(
        "--mode",
        choices=["dry-run", "live"],
        default=None,
        help="Execution mode (default: system.json execution_mode)",
    )
    parser.add_argument(
        "--symbols",
        nargs="+",
        default=None,
        help="Symbols to trade (default: strategy.json symbols)",
    )
    parser.add_argument(
        "--csv-dir",
        default=None,
        help="Directory of {SYMBOL}_{TF}.csv files for dry-run",
    )
    parser.add_argument(
        "--poll-seconds",
        type=int,
        default=None,
        help="Polling interval in seconds for live mode",
    )
    parser.add_argument(
        "--log-dir",
        default="logs",
        help="Directory for JSON run logs (default: logs)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> Dict[str, object]:
    args = parse_args(argv)
    log_file = setup_logging(args.log_dir)

    system = config_loader.get_config("system")
    overrides = {"symbols": args.symbols} if args.symbols else {}
    config = config_loader.strategy_config(**overrides)
    mode = args.mode or system.get("execution_mode", "dry-run")

    logger.info("session_start", extra={
        "mode": mode,
        "symbols": list(config.symbols),
        "config_hash": config.config_hash.hash_value,
        "log_file": str(log_file),
    })

    if mode == "live":
        poll = args.poll_seconds or int(system.get("poll_seconds", 10))
        orchestrator = run_live(config, system, poll)
    else:
        csv_dir = args.csv_dir or (system.get("csv", {}) or {}).get("directory", "infra/data")
        orchestrator = run_dry_run(config, system, csv_dir)

    stats = orchestrator.get_pipeline_stats() if orchestrator else {}
    stats.update({"mode": mode, "log_file": str(log_file)})
    logger.info("session_end", extra={"stats": stats})
    return stats


if __name__ == "__main__":
    results = main()
    print(json.dumps(results, indent=2))
