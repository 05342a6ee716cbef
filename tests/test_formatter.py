import pytest

from bevy_site.formatter import check, format_file, format_tree

UNFORMATTED = """```rust
# test
# test 2
fn not_hidden() {

}
# test 3
#[derive(Component)]
struct A;
# #[derive(Component)]
struct B;
```
"""

FORMATTED = """```rust,hide_lines=1-2 6 9
# test
# test 2
fn not_hidden() {

}
# test 3
#[derive(Component)]
struct A;
# #[derive(Component)]
struct B;
```
"""


def test_add_missing_annotation():
    assert format_file(UNFORMATTED) == FORMATTED


def test_update_wrong_annotation():
    markdown = "```rust,hide_lines=2-3 7\n# test\n# test 2\nfn not_hidden() {\n\n}\n# test 3\n```\n"
    expected = "```rust,hide_lines=1-2 6\n# test\n# test 2\nfn not_hidden() {\n\n}\n# test 3\n```\n"
    assert format_file(markdown) == expected


def test_remove_annotation():
    markdown = "```rust,hide_lines=2-3 7\nfn not_hidden() {\n\n}\n```\n"
    expected = "```rust\nfn not_hidden() {\n\n}\n```\n"
    assert format_file(markdown) == expected


def test_indented():
    markdown = (
        "\n"
        "    ```rust\n"
        "    # test\n"
        "    # test 2\n"
        "    fn not_hidden() {\n"
        "\n"
        "    }\n"
        "    # test 3\n"
        "    #[derive(Component)]\n"
        "    struct A;\n"
        "    # #[derive(Component)]\n"
        "    struct B;\n"
        "    ```\n"
    )
    expected = markdown.replace("    ```rust\n", "    ```rust,hide_lines=1-2 6 9\n")
    assert format_file(markdown) == expected


def test_non_rust_blocks_pass_through():
    markdown = "text\n```js\n# not hidden\n```\nmore\n"
    assert format_file(markdown) == markdown


def test_formatting_is_idempotent():
    assert format_file(format_file(UNFORMATTED)) == FORMATTED


def test_check_lists_unformatted_files(tmp_path):
    (tmp_path / "sub").mkdir()
    bad = tmp_path / "sub" / "bad.md"
    bad.write_text(UNFORMATTED, encoding="utf-8")
    (tmp_path / "good.MD").write_text(FORMATTED, encoding="utf-8")
    (tmp_path / "ignored.txt").write_text(UNFORMATTED, encoding="utf-8")
    assert check(tmp_path) == [bad]
    assert bad.read_text(encoding="utf-8") == UNFORMATTED


def test_format_tree_rewrites_files(tmp_path):
    target = tmp_path / "page.md"
    other = tmp_path / "notes.txt"
    target.write_text(UNFORMATTED, encoding="utf-8")
    other.write_text(UNFORMATTED, encoding="utf-8")
    format_tree(tmp_path)
    assert target.read_text(encoding="utf-8") == FORMATTED
    assert other.read_text(encoding="utf-8") == UNFORMATTED
    assert check(tmp_path) == []


def test_check_rejects_non_directory(tmp_path):
    with pytest.raises(NotADirectoryError):
        check(tmp_path / "missing")