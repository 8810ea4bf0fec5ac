from booksite.run import build_parser, main, overrides_from_args


def test_cli_arguments_become_overrides():
    args = build_parser().parse_args(["--port", "9001", "--public-path", "site", "--root-url", "/docs/"])
    assert overrides_from_args(args) == {"port": 9001, "public-path": "site", "root-url": "/docs/"}


def test_configuration_error_exit_code(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 2
    assert "configuration file not found" in capsys.readouterr().err
