from typer.testing import CliRunner

import codesmith
from codesmith.ui.cli import app


def test_get_version_matches_public_api() -> None:
    assert codesmith.get_version() == codesmith.__version__
    assert isinstance(codesmith.__version__, str)


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == codesmith.get_version()
