"""
Main entry point for headless Letter Stacks runs.

Usage:
    python -m letterstacks.main config.yaml
    python -m letterstacks.main config.yaml --output results/run1.json --verbose
    python -m letterstacks.main --audit --level 25 --cycles 200
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import yaml

from .environment import LetterStacksRun, RunConfig, audit_spawns


def load_config(config_path: str) -> RunConfig:
    """Load run configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return RunConfig(**data)


def run_audit(args: argparse.Namespace) -> int:
    audit = audit_spawns(level=args.level, cycles=args.cycles, seed=args.seed)
    print(json.dumps(audit.summary(), indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Run a headless Letter Stacks game with an LLM player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  rows: 6
  cols: 5
  seed: 42
  max_turns: 50
  turn_ms: 4000
  dictionary: words.txt
  settings:
    level: 7
    stack_ceiling: 7
  player:
    model: gpt-4o
    temperature: 0.7
        """
    )
    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML configuration file (not needed with --audit)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to save results JSON (default: results/<timestamp>.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress to stdout and log at DEBUG level"
    )
    parser.add_argument(
        "--audit",
        action="store_true",
        help="Run the spawn audit instead of a game"
    )
    parser.add_argument("--level", type=int, default=25, help="Audit level (default: 25)")
    parser.add_argument("--cycles", type=int, default=200, help="Audit cycles (default: 200)")
    parser.add_argument("--seed", type=int, default=None, help="Audit random seed")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    # LiteLLM is chatty at DEBUG
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    if args.audit:
        return run_audit(args)

    if not args.config:
        print("Error: config file required (or use --audit)", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path("results") / f"run_{timestamp}.json"

    run = LetterStacksRun.create(config=config)

    if args.verbose:
        print(f"Config: {args.config}")
        print(f"Output: {output_path}")
        print()

    try:
        result = run.run(verbose=args.verbose)
    except KeyboardInterrupt:
        print("\nRun interrupted by user")
        run.end_reason = "Interrupted by user"
        result = run.get_result()
    except Exception as e:
        print(f"Error during run: {e}", file=sys.stderr)
        run.end_reason = f"Error: {str(e)}"
        result = run.get_result()

    run.save_result(output_path)

    if args.verbose:
        print()
        print(f"Results saved to: {output_path}")

    print()
    print("=== Run Summary ===")
    print(f"Status: {result.status}")
    print(f"Total turns: {result.total_turns}")
    print(f"End reason: {result.end_reason}")
    print(f"Words: {len(result.words)}")
    print(f"Letters spawned: {result.letters_spawned}")
    print(f"Game time: {result.elapsed_ms / 1000:.1f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
