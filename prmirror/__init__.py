"""prmirror - read-only mirror of a pull request's changed files.

Reconstructs the base and head content of every file a pull request changes,
names each side with a stable document token, and reports the line ranges
where review comments can be anchored.

A well-structured CLI package following:
- CLI Architecture: Single entry point dispatcher with explicit parameters
- Domain Modeling: Parse-once pattern with type-safe models
- Services Pattern: Core services with dependency injection
- Python Code Style: Organized methods, section headers, modern annotations

Usage:
    python -m prmirror <command> [options]
    prmirror <command> [options]

Structure:
    prmirror/
    ├── __main__.py              # Entry point dispatcher
    ├── config.py                # Layered configuration (flags, env, YAML)
    ├── domain/                  # Domain models (parse-once pattern)
    │   ├── diff.py              # DiffHunk, DiffLine, parse_diff_hunks
    │   ├── change.py            # ChangeRecord variants, ReviewComment
    │   ├── address.py           # Document address codec
    │   ├── github.py            # PullRequest, RawFileChange
    │   └── diff_source.py       # DiffSource
    ├── services/                # Business logic services
    │   ├── change_set_resolver.py
    │   ├── content_reconstructor.py
    │   ├── commenting_ranges.py
    │   ├── git_operations.py
    │   └── session.py
    ├── infrastructure/          # External system interactions
    │   ├── content_registry.py
    │   ├── github/              # REST client, gh runner
    │   └── pr_source/           # GitHub and local git sources
    └── commands/                # Thin command orchestrators
        ├── files.py
        ├── document.py
        └── parse_diff.py
"""
