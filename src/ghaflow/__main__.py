import argparse
import logging
import runpy
import sys
from pathlib import Path

from ._sink import LocalFileSink
from ._validation import PersistenceError, ValidationError
from ._workflow import Workflow

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Process command line arguments"""

    parser = argparse.ArgumentParser(
        prog="ghaflow", description="Write GitHub Actions workflows defined in Python."
    )
    parser.add_argument(
        "definition", help="Python file defining workflows at module level"
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Repository root to write .github/workflows under (default: .)",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the workflows instead of writing them",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log more details"
    )

    args = parser.parse_args(argv)

    levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    logging.basicConfig(
        level=levels[min(args.verbose, len(levels) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        workflows = load_workflows(Path(args.definition))
    except ValidationError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    if not workflows:
        print(f"error: no workflows defined in {args.definition}", file=sys.stderr)
        return 1

    if args.stdout:
        for i, workflow in enumerate(workflows):
            if i:
                sys.stdout.write("---\n")
            sys.stdout.write(workflow.to_yaml())
        return 0

    sink = LocalFileSink(args.root)
    try:
        for workflow in workflows:
            workflow.write_to_file(sink)
    except PersistenceError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    return 0


def load_workflows(definition: Path) -> list[Workflow]:
    """Runs a definition file and returns the workflows it defines

    Args:
        definition: a Python file with `Workflow` instances at module level

    Returns:
        the workflows in definition order, each once
    """
    logger.debug("Loading %s", definition)
    namespace = runpy.run_path(str(definition), run_name="__ghaflow__")
    workflows = list[Workflow]()
    for value in namespace.values():
        if isinstance(value, Workflow) and not any(value is w for w in workflows):
            workflows.append(value)
    return workflows


if __name__ == "__main__":
    sys.exit(main())
