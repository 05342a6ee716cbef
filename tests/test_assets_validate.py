import pytest

from bevy_site.assets_model import Asset, Section
from bevy_site.assets_validate import (
    MAX_DESCRIPTION_LENGTH,
    MAX_IMAGE_BYTES,
    AssetError,
    ValidationError,
    has_forbidden_formatting,
    main,
    validate_asset,
    validate_image,
    validate_section,
)


def make_asset(description="A fine asset", **kwargs):
    return Asset(
        name="Thing", link="https://crates.io/crates/thing", description=description, **kwargs
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("plain text", False),
        ("two\nlines", True),
        ("# heading", True),
        ("see [docs](https://example.com/docs)", True),
        ("see [docs](/local/page)", True),
        ("brackets [alone] and (parens)", False),
    ],
)
def test_has_forbidden_formatting(text, expected):
    assert has_forbidden_formatting(text) is expected


def test_valid_asset_has_no_errors():
    assert validate_asset(make_asset()) is None


def test_description_too_long():
    error = validate_asset(make_asset("a" * (MAX_DESCRIPTION_LENGTH + 1)))
    assert error.kinds == [ValidationError.DESCRIPTION_TOO_LONG]
    assert validate_asset(make_asset("a" * MAX_DESCRIPTION_LENGTH)) is None


def test_description_length_counts_bytes():
    error = validate_asset(make_asset("é" * 51))
    assert error.kinds == [ValidationError.DESCRIPTION_TOO_LONG]


def test_missing_image_with_bad_extension(tmp_path):
    asset = make_asset(image="pic.bmp", original_path=tmp_path / "thing.toml")
    error = validate_asset(asset)
    assert error.kinds == [
        ValidationError.IMAGE_INVALID_EXTENSION,
        ValidationError.IMAGE_INVALID_LINK,
    ]


def test_existing_image_is_valid(tmp_path):
    (tmp_path / "pic.png").write_bytes(b"data")
    assert validate_asset(make_asset(image="pic.png", original_path=tmp_path / "t.toml")) is None


def test_validate_image_too_large(tmp_path):
    image = tmp_path / "big.png"
    image.write_bytes(b"\0" * (MAX_IMAGE_BYTES + 1))
    assert validate_image(image) == (
        ValidationError.IMAGE_FILE_SIZE_TOO_LARGE,
        MAX_IMAGE_BYTES + 1,
    )
    assert validate_image(tmp_path / "missing.png") == (ValidationError.IMAGE_INVALID_LINK, None)


def test_messages():
    assert (
        ValidationError.DESCRIPTION_TOO_LONG.message()
        == "Description must be at most 100 chars in length."
    )
    assert ValidationError.IMAGE_INVALID_LINK.message() == "Image file not found."
    assert ValidationError.IMAGE_FILE_SIZE_TOO_LARGE.message(5).startswith("Image file size 5 ")


def test_asset_error_str():
    error = AssetError(
        "Thing",
        [(ValidationError.DESCRIPTION_WITH_FORMATTING, None)],
    )
    assert str(error) == "Thing\n  Description must not contain formatting.\n"


def test_validate_section_recurses():
    bad = make_asset("# heading")
    tree = Section(name="root", content=[make_asset(), Section(name="sub", content=[bad])])
    errors = validate_section(tree)
    assert len(errors) == 1
    assert errors[0].kinds == [ValidationError.DESCRIPTION_WITH_FORMATTING]


def _write_asset(directory, name, description):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{name}.toml").write_text(
        f'name = "{name}"\n'
        'link = "https://crates.io/crates/thing"\n'
        f'description = "{description}"\n',
        encoding="utf-8",
    )


def test_main_valid(tmp_path):
    _write_asset(tmp_path / "Plugins", "good", "fine")
    assert main([str(tmp_path)]) == 0


def test_main_invalid(tmp_path, capsys):
    _write_asset(tmp_path / "Plugins", "bad", "x" * 150)
    _write_asset(tmp_path / "Plugins", "good", "fine")
    assert main([str(tmp_path)]) == 1
    err = capsys.readouterr().err
    assert "1 asset(s) are invalid." in err
    assert "bad" in err