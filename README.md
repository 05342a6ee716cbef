# bevy_site

Tools that build and check the generated content of a Zola website for a
game engine: asset listings, community pages, error-code reference pages,
and the `hide_lines` annotations on Rust code blocks in Markdown.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### Code-block hide-lines annotations

Rust code blocks (fences tagged `rust` or `rs`) may contain lines starting
with `# ` (or a lone `#`) that are hidden on the rendered page. The
`hide_lines` annotation on the opening fence must list exactly those lines,
as one-based ranges such as `hide_lines=1-2 6 9`.

```
bevy-hide-lines check content/learn content/news
bevy-hide-lines format content/learn content/news
```

`check` lists every `.md` file (searched recursively) whose annotations are
out of date and exits with status 1 if there are any. When the environment
variable `GITHUB_ACTIONS` is `true`, the output is grouped and each
unformatted file is printed as a workflow error annotation. `format` rewrites
the files in place: it adds, corrects or removes the `hide_lines` annotation
and keeps every other annotation as it was.

### Error-code pages

```
bevy-generate-errors --errors-path path/to/errors --output-path content/learn
```

Reads every file in the errors directory whose name contains a `B0000`-style
code, strips its built-in `# B0000` heading, moves the annotations of
```` ```rust ```` fences ahead of the `rust` tag (for example
`rust,should_panic` becomes `should_panic,rust`), and writes an `errors`
section under the output path: an `_index.md`, an `introduction.md` with
weight 0, and one page per error code, named in lower case and weighted from
1 in sorted file-name order.

### Community pages

```
bevy-generate-community path/to/community content community
bevy-validate-community path/to/community
```

The community directory holds one TOML file per member, grouped into folders.
Each folder is a section, configured by an optional `_category.toml` with
`order` and `sort_order_reversed`. A `_roles.toml` file lists
`project-lead`, `maintainer` and `sme` (each with `area` and `id`) entries by
GitHub id.

Member files use kebab-case keys: `name` (required), `profile-picture`
(`GitHub` or a file next to the member file), `sponsor`, `bio`, `discord`,
`discord-userid`, `github`, `mastodon` (`@user@instance`), `twitter`,
`instagram`, `itch-io`, `steam-developer` and `website`. Unknown keys are an
error.

The generator writes a `_index.md` per section and a page per member. Within
a section, subsections come first, then members ordered by role (project
leads, maintainers, subject-matter experts, everyone else), shuffled within
each group. It then writes a `donate` section: a copy of the
"The Bevy Organization" section holding only members with a `sponsor`. Section
directories are created fresh, so the output must not already contain them.

The validator stops at the first problem and exits with status 1 if it finds
one: a profile-picture file that does not exist, a `GitHub` picture without a
`github` id, a bio longer than 180 grapheme clusters, or `roles` set in a
member file.

### Asset pages

```
bevy-generate-assets path/to/assets content
bevy-generate-assets path/to/assets content --crates-db data/crates.db
bevy-validate-assets path/to/assets
```

Each asset is a TOML file with `name`, `link`, `description` and optional
`order`, `image`, `crate`, `licenses` and `bevy_versions`; folders are
sections, configured by an optional `_category.toml` as for the community.

When licences or engine versions are missing, the generator looks them up:

- for crates.io links (or assets with a `crate`), in a SQLite copy of the
  crates.io database dump (`--crates-db`, by default `data/crates.db`), which
  must hold the `crates`, `versions` and `dependencies` tables;
- for GitHub links, through the GitHub API when `GITHUB_TOKEN` is set, reading
  the root `Cargo.toml`, the repository licence and then other `Cargo.toml`
  files;
- for GitLab links, through the GitLab API, reading the root `Cargo.toml`.

Failures to find metadata are reported on standard error and do not stop the
run. Assets are then ordered: those with a manual `order` first, then those
whose first `bevy_versions` requirement accepts the latest engine release in
the database, the rest at random. Images are copied next to the pages.

The validator reports, for every asset, a description longer than 100 bytes
of UTF-8 or containing a line break, a leading `#` or a Markdown link, and an
image that is missing, has an extension other than gif, jpg, jpeg, png or
webp, or is larger than 2,097,152 bytes. It exits with status 1 when any
asset is invalid.

## What the package does not do

- It does not download the crates.io database dump; `bevy-generate-assets`
  expects a SQLite file already on disk at the `--crates-db` path.
- It does not produce release material such as changelogs, migration guides,
  release notes or contributor lists.

## Library use

The pieces behind the commands can be used directly, for example:

```python
from bevy_site.formatter import format_file
from bevy_site.hidden_ranges import get_hidden_ranges
from bevy_site.code_block_definition import CodeBlockDefinition

print(format_file("```rust\n# use a::b;\nfn main() {}\n```\n"))
print(get_hidden_ranges(["# hidden", "shown", "# hidden"]))
print(CodeBlockDefinition.parse("```rust,hide_lines=1-2 4").get_hidden_ranges())
```

Other entry points include `bevy_site.manifest.get_bevy_version_from_manifest`,
`bevy_site.metadata.parse_assets`, `bevy_site.community.parse_members` and
`bevy_site.assets_generate.version_req_matches`, which checks a Cargo-style
version requirement against a version.