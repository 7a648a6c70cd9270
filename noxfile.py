"""Nox automation for Tariff Impact Analyzer development tasks."""

import shutil
from pathlib import Path

import nox

# Default sessions to run
nox.options.sessions = ["lint", "test"]


@nox.session(python=["3.11", "3.12", "3.13"])
def test(session: nox.Session) -> None:
    """Run the test suite with coverage."""
    session.install("-e", ".[test]")
    session.run(
        "pytest",
        "--cov=tariffimpact",
        "--cov-report=term-missing",
        "--cov-fail-under=80",
        "-q",
        *session.posargs,
    )


@nox.session(python="3.11")
def lint(session: nox.Session) -> None:
    """Run linting with ruff and black."""
    session.install("ruff", "black")
    session.run("ruff", "check", ".")
    session.run("black", "--check", ".")


@nox.session(python="3.11")
def typecheck(session: nox.Session) -> None:
    """Run type checking with mypy."""
    session.install("mypy", "pandas-stubs", "types-PyYAML")
    session.install("-e", ".")
    session.run("mypy", "tariffimpact")


@nox.session(python=False)
def smoke(session: nox.Session) -> None:
    """Run the CLI end to end on the built-in sample news.

    Writes the report and sector table under runs/smoke and checks that
    both files exist.
    """
    out_dir = Path("runs") / "smoke"
    out_dir.mkdir(parents=True, exist_ok=True)

    session.run(
        "python",
        "-m",
        "tariffimpact",
        "analyze",
        "--no-emoji",
        "--csv",
        "--out-dir",
        str(out_dir),
    )

    reports = sorted(out_dir.glob("tariff-report-*.json"))
    tables = sorted(out_dir.glob("tariff-sectors-*.csv"))
    if not reports or not tables:
        session.error(f"Smoke run did not write outputs to {out_dir}")

    session.log("Smoke test passed!")


@nox.session(python=False)
def clean(session: nox.Session) -> None:
    """Clean up generated files and caches."""
    paths_to_remove = [
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".coverage",
        "htmlcov",
        ".nox",
        "dist",
        "build",
        "*.egg-info",
        "runs",
    ]

    for pattern in paths_to_remove:
        for path in Path(".").glob(pattern):
            session.log(f"Removing {path}")
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
