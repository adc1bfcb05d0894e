#!/usr/bin/env python3
"""
Command-line interface for dicebag.

Provides commands for rolling dice expressions, batch rolls, inspecting the
postfix form of an expression and running the HTTP API.
"""

import argparse
import json
import sys

from dicebag.core.config import BREAKDOWN_STYLES, LOG_LEVELS, get_config
from dicebag.core.logging_config import setup_logging
from dicebag.core.result import ErrorCode
from dicebag.engine import DiceRoller, RollService
from dicebag.engine.formatter import (
    format_record,
    format_rolls,
    needs_detailed_view,
    record_to_dict,
    total_is_redundant,
)


def build_service(args) -> RollService:
    """Create a RollService from config, with CLI overrides applied."""
    config = get_config()
    roller = DiceRoller(
        seed=args.seed if args.seed is not None else config.dice_seed,
        max_dice=config.max_dice,
        max_batch_count=config.max_batch_count,
        style=args.style or config.breakdown_style,
        max_breakdown_length=config.max_breakdown_length
    )
    return RollService(roller)


def _fail(result) -> None:
    print(f"✗ Error [{result.error_code}]: {result.error}", file=sys.stderr)
    sys.exit(1)


def load_config():
    """Load and check the config; exit with an error line for each bad setting."""
    try:
        config = get_config()
    except ValueError as e:
        problems = [str(e)]
    else:
        problems = config.problems()

    if problems:
        for problem in problems:
            print(f"✗ Error [{ErrorCode.INVALID_CONFIG}]: {problem}", file=sys.stderr)
        sys.exit(1)
    return config


def cmd_roll(args):
    """Roll a dice expression."""
    service = build_service(args)
    result = service.roll(' '.join(args.command))
    if not result.success:
        _fail(result)

    outcome = result.data
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
        return

    style = service.roller.style
    evaluation = outcome.result

    if needs_detailed_view(evaluation):
        if outcome.annotation:
            print(f"Reason:  {outcome.annotation}")
        print(f"Command: {outcome.expression}")
        print(f"Rolls:   {format_rolls(evaluation.rolls, style, service.roller.max_breakdown_length)}")
        print(f"Result:  {outcome.total_display}")
        return

    line = ''
    if outcome.annotation:
        line += f"{outcome.annotation}: "
    if evaluation.rolls:
        line += format_rolls(evaluation.rolls, style)
    if not total_is_redundant(evaluation):
        if evaluation.rolls:
            line += ' '
        line += f"Result: {outcome.total_display}"
    print(line.strip())


def cmd_batch(args):
    """Roll the same expression several times."""
    service = build_service(args)
    result = service.batch_roll(' '.join(args.command), args.count)
    if not result.success:
        _fail(result)

    outcome = result.data
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
        return

    print(f"Command: {outcome.expression}")
    print(f"Count:   {outcome.count}")
    if outcome.annotation:
        print(f"Reason:  {outcome.annotation}")
    print(outcome.listing)


def cmd_rpn(args):
    """Show the postfix form of an expression."""
    service = build_service(args)
    result = service.rpn(' '.join(args.command))
    if not result.success:
        _fail(result)

    if args.json:
        print(json.dumps({'rpn': result.data}))
    else:
        print(' '.join(result.data))


def cmd_jail(args):
    """Put the dice in dice jail and roll a sample with the new ones."""
    service = build_service(args)
    result = service.new_dice()
    record = result.data

    if args.json:
        print(json.dumps(record_to_dict(record), indent=2))
        return

    print("The previous dice have been put in dice jail for now. 🎲⛓️")
    print(f"Sample rolls: {format_record(record, service.roller.style)}")


def cmd_serve(args):
    """Run the HTTP API."""
    from dicebag.web.server import create_app

    config = get_config()
    app = create_app(config)
    app.run(
        host=args.host or config.host,
        port=args.port or config.port,
        debug=config.debug
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='dicebag - dice and arithmetic expression roller'
    )
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed the dice for reproducible rolls')
    parser.add_argument('--style', choices=BREAKDOWN_STYLES, default=None,
                        help='Breakdown style (default from BREAKDOWN_STYLE)')
    parser.add_argument('--json', action='store_true',
                        help='Print machine-readable JSON')
    parser.add_argument('--log-level', default=None, type=str.upper, choices=LOG_LEVELS,
                        help='Logging level (default from LOG_LEVEL)')
    subparsers = parser.add_subparsers(dest='command_name', help='Command to run')

    # ========== roll ==========
    parser_roll = subparsers.add_parser('roll', help='Roll a dice expression')
    parser_roll.add_argument('command', nargs='+',
                             help="Expression, optionally followed by '!' and a reason")
    parser_roll.set_defaults(func=cmd_roll)

    # ========== batch ==========
    parser_batch = subparsers.add_parser('batch', help='Roll an expression several times')
    parser_batch.add_argument('count', type=int, help='Number of rolls')
    parser_batch.add_argument('command', nargs='+',
                              help="Expression, optionally followed by '!' and a reason")
    parser_batch.set_defaults(func=cmd_batch)

    # ========== rpn ==========
    parser_rpn = subparsers.add_parser('rpn', help='Show the postfix form of an expression')
    parser_rpn.add_argument('command', nargs='+', help='Expression')
    parser_rpn.set_defaults(func=cmd_rpn)

    # ========== jail ==========
    parser_jail = subparsers.add_parser('jail', help='Put bad dice in dice jail and get new dice')
    parser_jail.set_defaults(func=cmd_jail)

    # ========== serve ==========
    parser_serve = subparsers.add_parser('serve', help='Run the HTTP API')
    parser_serve.add_argument('--host', default=None, help='Bind address (default from HOST)')
    parser_serve.add_argument('--port', type=int, default=None, help='Port (default from PORT)')
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        sys.exit(1)

    config = load_config()
    setup_logging(
        level=args.log_level or config.log_level,
        log_file=config.log_file
    )

    args.func(args)


if __name__ == '__main__':
    main()
