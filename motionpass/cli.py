"""motionpass command-line interface.

Usage examples:
    python -m motionpass.cli estimate 'Tr0ub4dor&3'
    python -m motionpass.cli estimate -g 1e12 hunter2 correcthorse
    python -m motionpass.cli simulate -t 24 --seed 7
"""

import argparse
import logging
import sys

from motionpass import (
    Authorization,
    GeneratorConfig,
    GeneratorEngine,
    PseudoRandomSource,
    estimate_crack_seconds,
    estimate_entropy,
    humanize_seconds,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="motionpass",
        description="Estimate password strength or simulate movement-driven generation.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command")

    # ── estimate ───────────────────────────────────────────────────────
    est_p = sub.add_parser(
        "estimate", help="Show entropy and crack time for passwords",
    )
    est_p.add_argument("passwords", nargs="*", help="Passwords to estimate")
    est_p.add_argument(
        "-g", "--guesses", type=float, default=1e9,
        help="Attacker guesses per second (default: 1e9)",
    )

    # ── simulate ───────────────────────────────────────────────────────
    sim_p = sub.add_parser(
        "simulate", help="Feed movement ticks to the generator and print the result",
    )
    sim_p.add_argument(
        "-t", "--ticks", type=int, default=32,
        help="Number of movement ticks to feed (default: 32)",
    )
    sim_p.add_argument(
        "-m", "--max-length", type=int, default=64,
        help="Maximum password length (default: 64)",
    )
    sim_p.add_argument(
        "-g", "--guesses", type=float, default=1e9,
        help="Attacker guesses per second (default: 1e9)",
    )
    sim_p.add_argument(
        "--seed", type=int, default=None,
        help="Use a seeded, non-cryptographic source (reproducible output)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.command == "estimate":
        return _cmd_estimate(args)
    if args.command == "simulate":
        return _cmd_simulate(args)

    parser.print_help()
    return 0


def _cmd_estimate(args: argparse.Namespace) -> int:
    if not args.passwords:
        print("Error: provide at least one password", file=sys.stderr)
        return 1
    if args.guesses <= 0:
        print("Error: --guesses must be positive", file=sys.stderr)
        return 1

    for pwd in args.passwords:
        bits = estimate_entropy(pwd)
        label = humanize_seconds(estimate_crack_seconds(bits, args.guesses))
        print(f"  {pwd}  ({round(bits, 1)} bits, crack time {label})")

    return 0


def _cmd_simulate(args: argparse.Namespace) -> int:
    if args.ticks < 0:
        print("Error: --ticks must not be negative", file=sys.stderr)
        return 1
    if args.max_length < 1 or args.guesses <= 0:
        print("Error: --max-length and --guesses must be positive", file=sys.stderr)
        return 1

    config = GeneratorConfig(max_length=args.max_length, guesses_per_second=args.guesses)
    source = PseudoRandomSource(args.seed) if args.seed is not None else None
    engine = GeneratorEngine(random_source=source, config=config)

    engine.set_authorization(Authorization(connected=True, address="cli"))
    engine.toggle()
    engine.feed.emit(args.ticks)
    engine.toggle()

    state = engine.snapshot()
    print(f"  Password:    {state.password or '(no password yet)'}")
    print(f"  Length:      {state.length}")
    print(f"  Entropy:     {state.rounded_bits} bits")
    print(f"  Crack time:  {state.crack_time_label or '-'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
