"""Tests for the ``pagechain`` command-line entry points."""

from __future__ import annotations

import typing as typ

import pytest

from pagechain import cli

if typ.TYPE_CHECKING:
    from conftest import SampleSite
    from pytest_mock import MockerFixture


def test_build_command_reports_written_files(
    sample_site: SampleSite, capsys: pytest.CaptureFixture[str]
) -> None:
    status = cli.build(config=sample_site.config_path)

    out = capsys.readouterr().out
    assert status == 0
    assert "index.html" in out
    assert out.count("wrote ") == 5


def test_build_command_reports_failures(
    sample_site: SampleSite, capsys: pytest.CaptureFixture[str]
) -> None:
    (sample_site.source_dir / "broken.html").write_text(
        "---\nlayout: nope\n---\n", encoding="utf-8"
    )

    status = cli.build(config=sample_site.config_path)

    captured = capsys.readouterr()
    assert status == 1
    assert "failed broken.html" in captured.err
    assert '"nope" layout' in captured.err


def test_build_command_output_override(
    sample_site: SampleSite, capsys: pytest.CaptureFixture[str]
) -> None:
    target = sample_site.root / "dist"

    assert cli.build(config=sample_site.config_path, output_dir=target) == 0
    assert (target / "about" / "team.html").exists()


def test_nav_command_prints_outline(
    sample_site: SampleSite, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.nav(config=sample_site.config_path, url="/about/team.html")

    assert capsys.readouterr().out.splitlines() == [
        "About /about/ (parent)",
        "  Team /about/team.html (current)",
        "First post /blog/first.html",
    ]


def test_main_exits_with_command_status(mocker: MockerFixture) -> None:
    mocker.patch.object(cli, "app", return_value=1)

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
