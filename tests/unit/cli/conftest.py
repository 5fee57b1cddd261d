import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_engine(monkeypatch, dockerfile, fake_engine):
    """Route every command to the fake engine and the temporary Dockerfile."""
    monkeypatch.setenv("WSBOX_DOCKERFILE", str(dockerfile))
    monkeypatch.setattr("wsbox.cli.utils.DockerEngine", lambda binary: fake_engine)
    return fake_engine
