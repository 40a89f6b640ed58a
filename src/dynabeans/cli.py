"""Command-line inspector for contract definition files."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dynabeans.definition import (
    GetterMethod,
    InterfaceDefinition,
    MethodBehavior,
    SetterMethod,
)
from dynabeans.parsing import ContractParser
from dynabeans.registry import DefinitionRegistry


def describe_behavior(method_name: str, behavior: MethodBehavior) -> str:
    """Format one classified method as a table row."""
    if isinstance(behavior, (GetterMethod, SetterMethod)):
        return (
            f"  {method_name:<20} {behavior.kind:<13} "
            f"{behavior.property_name:<16} {behavior.value_type.name}"
        )
    return f"  {method_name:<20} {behavior.kind}"


def print_definition(definition: InterfaceDefinition) -> None:
    """Print the classified methods of a definition."""
    print(f"contract {definition.contract_name}")
    if not definition.methods:
        print("  (no methods)")
        return
    for method_name, behavior in definition.methods.items():
        print(describe_behavior(method_name, behavior))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Show how the methods of DSL contracts are classified"
    )
    arg_parser.add_argument(
        "file",
        type=Path,
        help="Path to a contract definition file",
    )
    arg_parser.add_argument(
        "-c", "--contract",
        type=str,
        help="Only show this contract",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log classification details",
    )

    args = arg_parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not args.file.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        contracts = ContractParser().parse(args.file.read_text())
    except (SyntaxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.contract and args.contract not in contracts:
        print(f"Error: Contract not found: {args.contract}", file=sys.stderr)
        return 1

    registry = DefinitionRegistry()
    for name, contract in contracts.items():
        if args.contract and name != args.contract:
            continue
        print_definition(registry.definition_for(contract))
    return 0


if __name__ == "__main__":
    sys.exit(main())
