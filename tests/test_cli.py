from typer.testing import CliRunner

from bulwark.config import settings
from bulwark.main import cli

runner = CliRunner()


def test_version():
    result = runner.invoke(cli, ["version"])
    assert result.exit_code == 0
    assert settings.app.version in result.stdout


def test_tree_prints_nested_units(tmp_path):
    result = runner.invoke(cli, ["tree", "--units-file", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].startswith("Army Headquarters [hq]")
    assert any(line.startswith("          1st Battalion [bn-1-1]") for line in lines)


def test_scope_lists_units(tmp_path):
    units = tmp_path / "units.yaml"
    units.write_text(
        "units:\n"
        "  - {id: hq, name: HQ}\n"
        "  - {id: div-1, name: Div 1, parent_id: hq}\n"
        "  - {id: bn-1-1, name: Bn 1, parent_id: div-1}\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli, ["scope", "--role", "ROLE_DIV", "--unit", "div-1", "--units-file", str(units)])
    assert result.exit_code == 0
    assert "2 units" in result.stdout
    assert "HQ > Div 1 > Bn 1" in result.stdout

    denied = runner.invoke(cli, ["scope", "--role", "ROLE_DIV", "--unit", "ghost", "--units-file", str(units)])
    assert denied.exit_code == 1


def test_scope_reports_broken_units_file(tmp_path):
    units = tmp_path / "units.yaml"
    units.write_text("units:\n  - {id: a, name: A}\n  - {id: b, name: B}\n", encoding="utf-8")
    result = runner.invoke(cli, ["scope", "--role", "ROLE_HQ", "--unit", "a", "--units-file", str(units)])
    assert result.exit_code == 2


def test_check_page():
    allowed = runner.invoke(cli, ["check-page", "/admin/users/new", "--role", "ROLE_DIV"])
    assert allowed.exit_code == 0
    assert "via /admin/users" in allowed.stdout

    denied = runner.invoke(cli, ["check-page", "/admin/settings", "--role", "ROLE_BN"])
    assert denied.exit_code == 1
    assert "redirect to /dashboard" in denied.stdout
