"""CLI to create, inspect and call the token ledger."""

from __future__ import annotations

import argparse
import sys

import orjson

from mintable.config.settings import Settings, load_settings
from mintable.host import LedgerHost
from mintable.ledger import EventBus, EventLedger, LedgerError
from mintable.monitoring.logging import configure_logging


def _amount(text: str) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"amount must be an integer, got {text!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerctl",
        description="Create, inspect and call the mintable token ledger.",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Create a new ledger")
    init.add_argument("--name", default=None, help="Token name (defaults to token.name)")
    init.add_argument("--caller", default=None, help="Minter account (defaults to token.minter)")

    mint = commands.add_parser("mint", help="Mint new supply (minter only)")
    mint.add_argument("--caller", required=True)
    mint.add_argument("to")
    mint.add_argument("value", type=_amount)

    burn = commands.add_parser("burn", help="Burn the caller's own balance")
    burn.add_argument("--caller", required=True)
    burn.add_argument("value", type=_amount)

    transfer = commands.add_parser("transfer", help="Transfer from the caller")
    transfer.add_argument("--caller", required=True)
    transfer.add_argument("to")
    transfer.add_argument("value", type=_amount)

    approve = commands.add_parser("approve", help="Set a spender's allowance")
    approve.add_argument("--caller", required=True)
    approve.add_argument("spender")
    approve.add_argument("value", type=_amount)

    transfer_from = commands.add_parser(
        "transfer-from", help="Transfer on behalf of an owner using the caller's allowance"
    )
    transfer_from.add_argument("--caller", required=True)
    transfer_from.add_argument("from_", metavar="from")
    transfer_from.add_argument("to")
    transfer_from.add_argument("value", type=_amount)

    balance = commands.add_parser("balance", help="Show an account balance")
    balance.add_argument("owner")

    allowance = commands.add_parser("allowance", help="Show a spender's allowance")
    allowance.add_argument("owner")
    allowance.add_argument("spender")

    commands.add_parser("info", help="Show name, minter and total supply")

    events = commands.add_parser("events", help="Print recent events as JSON lines")
    events.add_argument("--tail", type=int, default=20)

    return parser


def _open_host(settings: Settings) -> LedgerHost:
    bus = EventBus(EventLedger(settings.storage.ledger_path))
    return LedgerHost.open(bus, balance_bits=settings.token.balance_bits)


def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "init":
        name = args.name or settings.token.name
        caller = args.caller or settings.token.minter
        if not caller:
            print("error: no minter given (--caller or token.minter)", file=sys.stderr)
            return 2
        bus = EventBus(EventLedger(settings.storage.ledger_path))
        LedgerHost.create(name, caller, bus=bus, balance_bits=settings.token.balance_bits)
        print(f"Created ledger {name!r} with minter {caller}.")
        return 0

    if args.command == "events":
        ledger = EventLedger(settings.storage.ledger_path)
        for event in ledger.iter_events_tail(args.tail):
            print(orjson.dumps(event.to_dict()).decode())
        return 0

    host = _open_host(settings)
    token = host.token

    if args.command == "balance":
        print(token.balance_of(args.owner))
        return 0
    if args.command == "allowance":
        print(token.allowance(args.owner, args.spender))
        return 0
    if args.command == "info":
        print(f"name: {token.name()}")
        print(f"minter: {token.minter()}")
        print(f"total_supply: {token.total_supply()}")
        return 0

    arguments = {
        "mint": lambda: {"to": args.to, "value": args.value},
        "burn": lambda: {"value": args.value},
        "transfer": lambda: {"to": args.to, "value": args.value},
        "approve": lambda: {"spender": args.spender, "value": args.value},
        "transfer-from": lambda: {"from_": args.from_, "to": args.to, "value": args.value},
    }[args.command]()
    result = host.call(args.caller, args.command.replace("-", "_"), **arguments)
    if not result.ok:
        print(f"{result.error}: {result.message}", file=sys.stderr)
        return 1
    for event in result.events:
        print(orjson.dumps(event.to_dict()).decode())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    configure_logging("WARNING")
    try:
        return run(args, settings)
    except LedgerError as exc:
        print(f"{exc.code}: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
