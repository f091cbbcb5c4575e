"""
Standalone CLI for listing recorded scores.

Usage:
    python -m letterstacks.scoreboard results/scores.json
    python -m letterstacks.scoreboard results/scores.json --level 7
"""

import argparse
import sys
from pathlib import Path

from .environment.scores import JsonScoreLog, filter_scores, format_score


def main():
    parser = argparse.ArgumentParser(
        description="List Letter Stacks scores, newest first",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m letterstacks.scoreboard results/scores.json
  python -m letterstacks.scoreboard results/scores.json --level 12 --wins
        """
    )
    parser.add_argument(
        "scores",
        help="Path to the score log JSON file"
    )
    parser.add_argument(
        "--level", "-l",
        type=int,
        help="Only show scores for this level"
    )
    parser.add_argument(
        "--wins",
        action="store_true",
        help="Only show cleared boards"
    )

    args = parser.parse_args()

    scores_path = Path(args.scores)
    if not scores_path.exists():
        print(f"Error: Score log not found: {args.scores}", file=sys.stderr)
        sys.exit(1)

    records = filter_scores(JsonScoreLog(path=scores_path).records(), level=args.level)
    if args.wins:
        records = [r for r in records if r.mode == "win"]

    if not records:
        print("No scores yet.")
        return 0

    for record in records:
        print(format_score(record))

    return 0


if __name__ == "__main__":
    sys.exit(main())
