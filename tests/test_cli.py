import argparse

import pytest

from cli import main as cli


def test_parse_duration():
    assert cli.parse_duration("500ms") == pytest.approx(0.5)
    assert cli.parse_duration("2s") == 2.0
    assert cli.parse_duration("1.5s") == 1.5
    assert cli.parse_duration("1m") == 60.0
    assert cli.parse_duration("0.25") == 0.25


@pytest.mark.parametrize("value", ["", "fast", "-1s", "0ms", "5h"])
def test_parse_duration_rejects(value):
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_duration(value)


def test_defaults():
    args = cli.build_parser().parse_args(["-t", "10.0.0.1"])
    assert args.ports == "1-1024"
    assert args.concurrency == 100
    assert args.timeout == 0.5
    assert args.verbose is False
    assert args.output is None


def test_missing_target_exits_1(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_invalid_target_exits_1(capsys):
    assert cli.main(["-t", "999.1.1.1"]) == 1
    assert "[!] Error parsing target" in capsys.readouterr().out


def test_invalid_port_range_exits_1(capsys):
    assert cli.main(["-t", "127.0.0.1", "-p", "1-2-3"]) == 1
    assert "[!] Error parsing ports" in capsys.readouterr().out


def test_unwritable_report_exits_1(tmp_path, capsys):
    out = tmp_path / "missing" / "report.txt"
    assert cli.main(["-t", "127.0.0.1", "-p", "1", "-o", str(out)]) == 1
    assert "[!] Could not create file" in capsys.readouterr().out


def test_scan_prints_and_saves_open_port(listener, closed_port, tmp_path, capsys):
    srv = listener(b"SSH-2.0-test\r\n")
    out = tmp_path / "report.txt"
    rc = cli.main(["-t", "127.0.0.1", "-p", f"{srv.port},{closed_port}", "-c", "2", "--to", "500ms", "-o", str(out)])
    assert rc == 0

    stdout = capsys.readouterr().out
    assert f"Port: {srv.port}" in stdout
    assert "SSH-2.0-test" in stdout
    assert "1 open ports found" in stdout
    assert f"Port: {closed_port} " not in stdout

    text = out.read_text(encoding="utf-8")
    assert "Target: 127.0.0.1" in text
    assert f"Port: {srv.port}" in text
    assert "Status: closed" not in text
    assert text.rstrip().endswith("1 open ports found.")


def test_verbose_shows_closed_ports(closed_port, tmp_path, capsys):
    out = tmp_path / "report.txt"
    rc = cli.main(["-t", "127.0.0.1", "-p", str(closed_port), "-v", "-o", str(out)])
    assert rc == 0
    assert "Status: closed" in capsys.readouterr().out
    assert "Status: closed" in out.read_text(encoding="utf-8")


def test_console_without_tty_has_no_escape_codes(capsys):
    console = cli.Console(color=False)
    console.line("hello", cli.GREEN)
    console.status("scanning")
    assert capsys.readouterr().out == "hello\n"
