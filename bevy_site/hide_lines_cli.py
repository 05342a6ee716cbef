"""Command line entry point for checking or formatting ``hide_lines`` annotations."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from pathlib import Path

from bevy_site import formatter


def _quoted(path: Path) -> str:
    return f'"{path}"'


def run_check(folders: Sequence[Path]) -> int:
    """Check every folder; return 0 when all files are formatted, 1 otherwise."""
    if not folders:
        print(
            "Did not check any files because no folder arguments were passed.",
            file=sys.stderr,
        )
        return 1

    is_ci = os.environ.get("GITHUB_ACTIONS") == "true"
    unformatted: list[Path] = []

    for folder in folders:
        folder = Path(folder)
        if is_ci:
            print(f"::group::Checking folder {_quoted(folder)}")
        else:
            print(f"\nChecking folder {_quoted(folder)}")

        try:
            unformatted.extend(formatter.check(folder))
        except (OSError, ValueError) as error:
            if is_ci:
                print("::endgroup::")
            print(f"Error: {error}", file=sys.stderr)
            return 1

        if is_ci:
            print("::endgroup::")

    if not unformatted:
        print("All files are properly formatted. :)")
        return 0

    print("\nThe following files are not formatted:")
    for path in unformatted:
        if is_ci:
            print(
                f"::error file={_quoted(path)},title=File is not formatted with "
                f"correct hide-lines annotations::- {_quoted(path)}"
            )
        else:
            print(f"- {_quoted(path)}")
    print("\nRun write_rustdoc_hide_lines.sh to automatically fix these errors.")
    return 1


def run_format(folders: Sequence[Path]) -> int:
    """Format every folder; return 0 on success, 1 on the first error."""
    if not folders:
        print(
            "Did not format any files because no folder arguments were passed.",
            file=sys.stderr,
        )
        return 1

    for folder in folders:
        folder = Path(folder)
        print(f"\nFormatting folder {_quoted(folder)}")
        try:
            formatter.format_tree(folder)
        except (OSError, ValueError) as error:
            print(f"Error: {error}", file=sys.stderr)
            return 1

    print("\nAll files have been formatted successfully!")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``check`` or ``format`` subcommand and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(
            "No subcommand specified. Please use either 'format' or 'check'.",
            file=sys.stderr,
        )
        return 1

    command, folders = args[0], [Path(arg) for arg in args[1:]]
    if command == "check":
        return run_check(folders)
    if command == "format":
        return run_format(folders)

    print(
        f"Invalid subcommand '{command}' specified. Please use either 'format' or 'check'.",
        file=sys.stderr,
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())