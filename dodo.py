"""
Doit file to wrap development workflow commands.
"""

import shutil
from pathlib import Path

from doit.task import Task
from doit.tools import create_folder

PACKAGE = "epic_party"

OUT_PATH = Path("__out__")

# pytest results
TESTS_PATH = OUT_PATH / "test"
JUNIT_PATH = TESTS_PATH / "junit.xml"
COV_PATH = TESTS_PATH / "cov"
COV_HTML_PATH = COV_PATH / "html"
COV_XML_PATH = COV_PATH / "coverage.xml"

# generated from pytest results
BADGES_PATH = Path("badges")

MYPY_PATH = OUT_PATH / "mypy"

SOURCES = [PACKAGE, "test", "dodo.py"]


def _cmd(*args: str | Path) -> str:
    return " ".join(str(arg) for arg in args)


def _rmtree(path: Path):
    if path.exists():
        shutil.rmtree(path)


def task_test() -> Task:
    """
    Run tests with coverage.
    """

    return Task(
        "test",
        actions=[
            (create_folder, [COV_PATH]),
            _cmd(
                "pytest",
                f"--cov={PACKAGE}",
                "--cov-branch",
                f"--cov-report=html:{COV_HTML_PATH}",
                f"--cov-report=xml:{COV_XML_PATH}",
                f"--junitxml={JUNIT_PATH}",
            ),
        ],
        targets=[COV_XML_PATH, JUNIT_PATH],
        file_dep=[],
        clean=[(_rmtree, [TESTS_PATH])],
    )


def task_badges() -> Task:
    """
    Generate test and coverage badges from the latest test run.
    """

    badges = [
        ("tests", JUNIT_PATH, BADGES_PATH / "tests.svg"),
        ("coverage", COV_XML_PATH, BADGES_PATH / "cov.svg"),
    ]

    return Task(
        "badges",
        actions=[(create_folder, [BADGES_PATH])]
        + [_cmd("genbadge", kind, "-i", src, "-o", dst) for kind, src, dst in badges],
        targets=[dst for _, _, dst in badges],
        file_dep=[src for _, src, _ in badges],
    )


def task_format() -> Task:
    """
    Format sources in place.
    """

    return Task(
        "format",
        actions=[
            _cmd(
                "autoflake",
                "--remove-all-unused-imports",
                "--exclude=__init__.py",
                "-i",
                "-r",
                *SOURCES,
            ),
            _cmd("isort", *SOURCES),
            _cmd("black", *SOURCES),
            _cmd("toml-sort", "-i", "pyproject.toml"),
        ],
        targets=[],
        file_dep=[],
    )


def task_check() -> Task:
    """
    Check formatting and types without modifying anything.
    """

    return Task(
        "check",
        actions=[
            _cmd("isort", "--check-only", *SOURCES),
            _cmd("black", "--check", *SOURCES),
            _cmd("mypy", f"--html-report={MYPY_PATH}", PACKAGE),
        ],
        targets=[],
        file_dep=[],
        clean=[(_rmtree, [MYPY_PATH])],
    )
