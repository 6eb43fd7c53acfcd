import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session, *extras: str) -> None:
    """Install the project with the test extra (plus any others) into the nox virtualenv."""
    session.install("-e", f".[{','.join(('test', *extras))}]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no handlers, no HTTP)."""
    _install(session)
    session.run("pytest", "tests/storefront/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_fast(session: nox.Session) -> None:
    """Everything except the concurrency and HTTP tests."""
    _install(session)
    session.run("pytest", "-m", "not slow", *session.posargs)

