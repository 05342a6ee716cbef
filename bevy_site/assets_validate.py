"""Validation of the assets tree: descriptions and images."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from bevy_site.assets_model import Asset, Section
from bevy_site.metadata import MetadataSource, parse_assets

MAX_DESCRIPTION_LENGTH = 100
MAX_IMAGE_BYTES = 2_097_152
ALLOWED_IMAGE_EXTENSIONS = ("gif", "jpg", "jpeg", "png", "webp")

_MARKDOWN_LINK = re.compile(r"\[(.+)\]\(((?:/|https?://)[\w\d./?=#]+)\)")


class ValidationError(Enum):
    """A reason an asset is invalid."""

    DESCRIPTION_TOO_LONG = "description_too_long"
    DESCRIPTION_WITH_FORMATTING = "description_with_formatting"
    IMAGE_INVALID_LINK = "image_invalid_link"
    IMAGE_INVALID_EXTENSION = "image_invalid_extension"
    IMAGE_FILE_SIZE_TOO_LARGE = "image_file_size_too_large"

    def message(self, size: int | None = None) -> str:
        """Describe the problem; ``size`` is the image size for a too-large image."""
        if self is ValidationError.DESCRIPTION_TOO_LONG:
            return f"Description must be at most {MAX_DESCRIPTION_LENGTH} chars in length."
        if self is ValidationError.DESCRIPTION_WITH_FORMATTING:
            return "Description must not contain formatting."
        if self is ValidationError.IMAGE_INVALID_LINK:
            return "Image file not found."
        if self is ValidationError.IMAGE_INVALID_EXTENSION:
            return (
                "Image extension not allowed. Must be one of: "
                + ", ".join(ALLOWED_IMAGE_EXTENSIONS)
            )
        return f"Image file size {size} exceeds maximum {MAX_IMAGE_BYTES} bytes."


Problem = tuple[ValidationError, int | None]
"""A validation error and, for a too-large image, the image size."""


@dataclass
class AssetError:
    """All the problems found with one asset."""

    asset_name: str
    errors: list[Problem] = field(default_factory=list)

    @property
    def kinds(self) -> list[ValidationError]:
        return [kind for kind, _ in self.errors]

    def __str__(self) -> str:
        lines = [f"{self.asset_name}\n"]
        lines.extend(f"  {kind.message(size)}\n" for kind, size in self.errors)
        return "".join(lines)


def has_forbidden_formatting(text: str) -> bool:
    """Return whether a description holds line breaks, a heading or a Markdown link."""
    return "\n" in text or text.startswith("#") or _MARKDOWN_LINK.search(text) is not None


def validate_image(path: Path) -> Problem | None:
    """Return a problem if the image is missing or too large, else None."""
    try:
        size = Path(path).stat().st_size
    except OSError:
        return ValidationError.IMAGE_INVALID_LINK, None
    if size > MAX_IMAGE_BYTES:
        return ValidationError.IMAGE_FILE_SIZE_TOO_LARGE, size
    return None


def validate_asset(asset: Asset) -> AssetError | None:
    """Return the asset's problems, or None when it is valid."""
    errors: list[Problem] = []

    if len(asset.description.encode("utf-8")) > MAX_DESCRIPTION_LENGTH:
        errors.append((ValidationError.DESCRIPTION_TOO_LONG, None))
    if has_forbidden_formatting(asset.description):
        errors.append((ValidationError.DESCRIPTION_WITH_FORMATTING, None))

    if asset.image is not None:
        if asset.original_path is None:
            raise ValueError(f"{asset.name}: the asset file path is unknown")
        image_path = asset.original_path.parent / asset.image
        if image_path.suffix[1:] not in ALLOWED_IMAGE_EXTENSIONS:
            errors.append((ValidationError.IMAGE_INVALID_EXTENSION, None))
        problem = validate_image(image_path)
        if problem is not None:
            errors.append(problem)

    return AssetError(asset.name, errors) if errors else None


def validate_section(section: Section) -> list[AssetError]:
    """Return the problems of every asset in the section, recursively."""
    found: list[AssetError] = []
    for node in section.content:
        if isinstance(node, Section):
            found.extend(validate_section(node))
        else:
            error = validate_asset(node)
            if error is not None:
                found.append(error)
    return found


def main(argv: Sequence[str] | None = None) -> int:
    """Validate the assets directory; return 0 when every asset is valid."""
    parser = argparse.ArgumentParser(description="Validate the assets directory.")
    parser.add_argument("asset_dir", type=Path, help="path to the assets directory")
    args = parser.parse_args(argv)

    root = parse_assets(args.asset_dir, MetadataSource())
    errors = validate_section(root)
    if not errors:
        return 0

    print(file=sys.stderr)
    for error in errors:
        print(error, file=sys.stderr)
    print(f"{len(errors)} asset(s) are invalid.", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())