[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bevy_site"
version = "0.1.0"
description = "Content generators and checkers for a Zola-based game-engine website: assets, community, error pages and code-block hide-lines annotations."
requires-python = ">=3.11"
keywords = ["zola", "static-site", "markdown", "front-matter", "toml", "code-blocks"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Site Management",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "requests>=2.28",
    "semver>=3.0",
    "tomli-w>=1.0",
    "regex>=2023.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
bevy-hide-lines = "bevy_site.hide_lines_cli:main"
bevy-generate-errors = "bevy_site.errors:main"
bevy-generate-community = "bevy_site.community_generate:main"
bevy-validate-community = "bevy_site.community_validate:main"
bevy-generate-assets = "bevy_site.assets_generate:main"
bevy-validate-assets = "bevy_site.assets_validate:main"

[tool.hatch.build.targets.wheel]
packages = ["bevy_site"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
