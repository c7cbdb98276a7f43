import argparse
import asyncio
import logging
import sys
from colorama import init, Fore, Style

from alert_formatter import format_shutdown_message, format_startup_message
from config import ConfigError, load_config, validate_config, get_source_config, weights_sum
from pumpwatch import MoralisPumpFunAPI, PollScheduler, PumpFunAPI, ScanPipeline
from telegram_notifier import TelegramNotifier

init(autoreset=True)
logger = logging.getLogger("pumpwatch")

SOURCES = {
    'pumpfun': PumpFunAPI,
    'moralis': MoralisPumpFunAPI,
}


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pump.fun Launch Trend Monitor")
    parser.add_argument("--once", action="store_true",
                        help="Run a single scan cycle and exit")
    parser.add_argument("--dry-run", action="store_true",
                        help="Log alerts instead of sending them to Telegram")
    parser.add_argument("--source", choices=sorted(SOURCES),
                        help="Upstream launch feed (overrides UPSTREAM_SOURCE)")
    parser.add_argument("--interval", type=float,
                        help="Poll interval in seconds (overrides POLL_INTERVAL)")
    return parser


def print_banner(cfg: dict, dry_run: bool):
    print(f"{Fore.GREEN}🚀 PumpWatch starting...")
    print(f"{Fore.CYAN}📡 Source: {cfg['upstream_source']}")
    print(f"{Fore.CYAN}⏱️  Poll interval: {cfg['poll_interval']:.0f}s")
    print(f"{Fore.CYAN}🎯 Min volume threshold: ${cfg['min_volume_threshold']:,.0f}")
    print(f"{Fore.CYAN}💧 Min liquidity threshold: ${cfg['min_liquidity_threshold']:,.0f}")
    print(f"{Fore.CYAN}👥 Min holder count: {cfg['min_holder_count']}")
    print(f"{Fore.CYAN}🔔 Alert threshold: {cfg['alert_score_threshold']}/100 "
          f"(weights sum {weights_sum(cfg):.2f})")
    if dry_run:
        print(f"{Fore.YELLOW}🧪 DRY RUN - alerts are logged, not sent")
    print()


def print_cycle_summary(report):
    if not report.ok:
        print(f"{Fore.RED}⚠️  Scan failed: {report.error}")
        return
    color = Fore.GREEN if report.alerts_sent else Fore.WHITE
    print(
        f"{color}✅ Scan complete: {report.fetched} fetched, {report.new} new, "
        f"{report.scored} scored, {report.alerts_sent} alert(s) "
        f"{Style.DIM}[{report.duration:.1f}s]"
    )


async def run(args) -> int:
    try:
        cfg = load_config()
        if args.source:
            cfg['upstream_source'] = args.source
        if args.interval is not None:
            cfg['poll_interval'] = args.interval
        setup_logging(cfg['log_level'])
        validate_config(cfg, require_telegram=not args.dry_run)
    except ConfigError as e:
        print(f"{Fore.RED}Configuration error: {e}")
        print(f"{Fore.RED}Configuration validation failed. Please check your .env file.")
        return 1

    print_banner(cfg, args.dry_run)

    source = SOURCES[cfg['upstream_source']](get_source_config(cfg))
    notifier = TelegramNotifier(
        bot_token=cfg['telegram_bot_token'],
        chat_id=cfg['telegram_chat_id'],
        dry_run=args.dry_run,
        timeout_seconds=cfg['request_timeout_seconds'],
    )
    pipeline = ScanPipeline(source, notifier, cfg)
    scheduler = PollScheduler(cfg)

    async def cycle():
        print(f"{Fore.CYAN}🔍 Scanning for new coins...")
        report = await pipeline.run_cycle()
        print_cycle_summary(report)

    started = False
    try:
        await notifier.start()
        started = True
        await notifier.send_message_async(format_startup_message(cfg, args.dry_run))
        scheduler.install_signal_handlers()
        await scheduler.run(cycle, max_cycles=1 if args.once else None)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1
    finally:
        print(f"\n{Fore.YELLOW}🛑 Shutting down PumpWatch...")
        stats = pipeline.get_stats()["pipeline"]
        if started:
            await notifier.send_message_async(format_shutdown_message(stats))
        await source.close()
        await notifier.close()
        logger.info(f"Final stats: {stats}")

    return 0


def main() -> int:
    args = build_parser().parse_args()
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Monitoring stopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
