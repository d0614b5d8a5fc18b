import argparse
import asyncio
import sys

from fuzzy.core.config import FuzzerConfig
from fuzzy.core.engine import run
from fuzzy.core.errors import FuzzyError
from fuzzy.parsers.dictionary import load_dictionaries
from fuzzy.parsers.input import load_input
from fuzzy.reporters.console import Log

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="HTTP endpoint fuzzer")
    p.add_argument("-i", "--input", required=True,
                   help="YAML file describing host, base path and endpoints")
    p.add_argument("-d", "--dictionary", action="append",
                   help="Dictionary file or directory (repeatable, default ./dictionary)")
    p.add_argument("-c", "--concurrency", type=int, default=10,
                   help="Max concurrent requests")
    p.add_argument("--channel-size", type=int, default=32,
                   help="Result queue size")
    p.add_argument("-o", "--output", default="output.txt",
                   help="Failure output file")
    p.add_argument("--no-output", action="store_true",
                   help="Count failures without writing them to a file")
    p.add_argument("--timeout", type=float, default=10.0,
                   help="Per-request timeout in seconds")
    p.add_argument("--interval", type=float, default=5.0,
                   help="Seconds between metrics reports")
    p.add_argument("--proxy", help="Proxy (ej: http://127.0.0.1:8080)")
    p.add_argument("--verify", action="store_true",
                   help="Verify TLS certificates")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    return p


def config_from_args(args) -> FuzzerConfig:
    return FuzzerConfig(
        concurrency=args.concurrency,
        channel_size=args.channel_size,
        output_path=None if args.no_output else args.output,
        timeout=args.timeout,
        report_interval=args.interval,
        proxy=args.proxy,
        verify=args.verify,
    )


def main(argv=None, transport=None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    log = Log(verbose=args.verbose)
    log.info(f"fuzzy v{VERSION}")

    try:
        config = config_from_args(args)
    except ValueError as exc:
        p.error(str(exc))

    try:
        fuzz_input = load_input(args.input)
        dictionary = load_dictionaries(args.dictionary or ["./dictionary"], logger=log)
        log.info(f"Loaded {len(fuzz_input.paths)} endpoints, "
                 f"{len(dictionary.entries)} dictionary entries")
        asyncio.run(run(fuzz_input, dictionary, config, logger=log, transport=transport))
    except FuzzyError as exc:
        log.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
