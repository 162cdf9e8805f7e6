from __future__ import annotations

import nox

nox.options.default_venv_backend = "uv|virtualenv"
nox.options.reuse_existing_virtualenvs = True

PY311 = "3.11"
PY312 = "3.12"
PY313 = "3.13"
PY_VERSIONS = [PY311, PY312, PY313]
PY_DEFAULT = PY_VERSIONS[0]

DJ42 = "4.2"
DJ51 = "5.1"
DJ52 = "5.2"
DJMAIN = "main"
DJMAIN_MIN_PY = PY312
DJ_VERSIONS = [DJ42, DJ51, DJ52, DJMAIN]
DJ_DEFAULT = DJ42


def version(ver: str) -> tuple[int, ...]:
    """Convert a string version to a tuple of ints, e.g. "3.11" -> (3, 11)"""
    return tuple(map(int, ver.split(".")))


def should_skip(python: str, django: str) -> bool:
    # Django main requires Python 3.12+
    return django == DJMAIN and version(python) < version(DJMAIN_MIN_PY)


def django_requirement(django: str) -> str:
    if django == DJMAIN:
        return "django @ https://github.com/django/django/archive/refs/heads/main.zip"
    return f"django=={django}.*"


@nox.session
def test(session):
    session.notify(f"tests(python='{PY_DEFAULT}', django='{DJ_DEFAULT}')")


@nox.session
@nox.parametrize(
    "python,django",
    [
        (python, django)
        for python in PY_VERSIONS
        for django in DJ_VERSIONS
        if not should_skip(python, django)
    ],
)
def tests(session, django):
    session.install("-e", ".[test]", django_requirement(django))

    command = ["pytest"]
    for arg in session.posargs:
        if arg:
            command.extend(arg.split(" "))
    session.run(*command)
