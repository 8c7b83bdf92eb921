import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]
LATEST = PYTHON_VERSIONS[-1]

nox.options.sessions = ["tests"]


def _install(session: nox.Session, *extras: str) -> None:
    """poetry install medtrack plus its test group and the requested extras."""
    args = ["poetry", "install", "--with", "test"]
    for extra in extras:
        args += ["--extras", extra]
    session.run(*args, external=True)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole suite on the in-memory stores."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Aggregates, value objects and state machines; no HTTP stack."""
    _install(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=LATEST)
def tests_bdd(session: nox.Session) -> None:
    _install(session)
    session.run("pytest", "-m", "bdd", *session.posargs)


@nox.session(python=LATEST)
def tests_postgres(session: nox.Session) -> None:
    """Lifecycle tests against PostgreSQL. Needs DATABASE_URL."""
    _install(session, "postgres")
    # psycopg2's wheel cache can hand back a .so built for another interpreter
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", "psycopg2-binary")
    session.run("pytest", "--env", "postgres", "tests/medtrack/application/", *session.posargs)


@nox.session(python=LATEST)
def loadtest(session: nox.Session) -> None:
    """Headless locust run against a running API (``nox -s loadtest -- --host http://...``)."""
    _install(session, "loadtest")
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "--headless",
        "-u",
        "20",
        "-r",
        "2",
        "-t",
        "2m",
        *session.posargs,
    )
