# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from riskscreen.app import assess_entity, build_orchestrator
from riskscreen.config import ConfigurationError, configure_logging, get_scoring_config
from riskscreen.domain.assessment import DEFAULT_DEADLINE_SECONDS
from riskscreen.domain.model import Entity, EntityType, InvalidInputError, PartialDate
from riskscreen.payload import RiskVerdictPayload

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Screen entities against risk sources")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    assess = subparsers.add_parser("assess", help="Assess one entity and print the verdict")
    assess.add_argument("--name", type=str, required=True, help="Primary name of the entity")
    assess.add_argument(
        "--alias",
        dest="aliases",
        action="append",
        default=[],
        help="Alternative name (repeatable)",
    )
    assess.add_argument(
        "--type",
        dest="entity_type",
        choices=[entity_type.value for entity_type in EntityType],
        default=EntityType.PERSON.value,
        help="Entity type (default: %(default)s)",
    )
    assess.add_argument("--dob", type=str, help="Date of birth as YYYY, YYYY-MM or YYYY-MM-DD")
    assess.add_argument("--nationality", type=str, help="ISO country code")
    assess.add_argument(
        "--identifier",
        dest="identifiers",
        action="append",
        default=[],
        help="Document or registration number (repeatable)",
    )
    assess.add_argument(
        "--deadline",
        type=float,
        default=DEFAULT_DEADLINE_SECONDS,
        help="Seconds to wait for connectors (default: %(default)s)",
    )
    assess.add_argument(
        "--rules",
        type=str,
        help="TOML rules file (defaults to RISKSCREEN_RULES_FILE or built-in rules)",
    )
    assess.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _build_entity(args: argparse.Namespace) -> Entity:
    try:
        dob = PartialDate.parse(args.dob) if args.dob else None
    except ValueError as exc:
        raise ValueError(f"Invalid date of birth: {args.dob}") from exc
    return Entity(
        name=args.name,
        entity_type=EntityType(args.entity_type),
        aliases=tuple(args.aliases),
        date_of_birth=dob,
        nationality=args.nationality.strip().upper() if args.nationality else None,
        identifiers=frozenset(args.identifiers),
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        entity = _build_entity(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        orchestrator = build_orchestrator(scoring=get_scoring_config(parsed_args.rules))
        verdict = assess_entity(
            entity,
            deadline=parsed_args.deadline,
            orchestrator=orchestrator,
        )
    except (ConfigurationError, InvalidInputError):
        log.exception("Cannot assess entity")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during assessment")
        sys.exit(1)

    print(RiskVerdictPayload.from_verdict(verdict).model_dump_json(indent=parsed_args.indent))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
