import nox.sessions

# Nox
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = [
    'tests',
    'tests_requests',
]

# Versions
PYTHON_VERSIONS = ['3.9', '3.10', '3.11', '3.12']
REQUESTS_VERSIONS = [
    # Selective: releases that changed Session behavior
    '2.25.1', '2.26.0', '2.28.2', '2.31.0', '2.32.3',
]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.sessions.Session, *, overrides: dict[str, str] = {}):
    """ Run all tests """
    session.install('.[test]')

    if overrides:
        session.install(*(f'{name}=={version}' for name, version in overrides.items()))

    # Test
    args = []
    if not overrides:
        args.append('--cov=prestql')

    session.run('pytest', 'tests/', *args)


@nox.session(python=PYTHON_VERSIONS[-1])
def mypy(session: nox.sessions.Session):
    """ Type-check the code """
    session.install('.[test]')
    session.run('pytest', 'tests/', '-m', 'extra')


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize('requests', REQUESTS_VERSIONS)
def tests_requests(session: nox.sessions.Session, requests):
    """ Test against a specific requests version """
    tests(session, overrides={'requests': requests})
