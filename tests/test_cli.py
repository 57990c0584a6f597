# tests/test_cli.py
"""
测试 a2s-query 命令行的参数与配置解析、输出格式化。
"""

from unittest.mock import patch

import pytest

from a2s_core import cli
from a2s_core.exceptions import ConfigError
from a2s_core.models import (
    QueryPlayer,
    ServerInfo,
    ServerOS,
    ServerType,
    ServerVAC,
    ServerVisibility,
)


def _info(**extra) -> ServerInfo:
    return ServerInfo(
        protocol=17,
        name="Test Server",
        map="cp_badlands",
        folder="tf",
        game="Team Fortress",
        app_id=440,
        players=12,
        max_players=24,
        bots=0,
        server_type=ServerType.DEDICATED,
        os=ServerOS.LINUX,
        visibility=ServerVisibility.PRIVATE,
        vac=ServerVAC.SECURED,
        version="8622567",
        **extra,
    )


@pytest.mark.parametrize(
    "target, expected",
    [
        ("10.0.0.1:27016", {"host": "10.0.0.1", "port": 27016}),
        ("play.example.com", {"host": "play.example.com", "port": 27015}),
    ],
)
def test_parse_target(target, expected):
    assert cli.parse_target(target) == expected


def test_parse_target_bad_port():
    with pytest.raises(ConfigError):
        cli.parse_target("10.0.0.1:abc")


@pytest.mark.parametrize("target", ["[::1]:27015", "::1", "2001:db8::5"])
def test_parse_target_rejects_ipv6(target):
    with pytest.raises(ConfigError, match="IPv6"):
        cli.parse_target(target)


def test_help_mentions_ipv4_only():
    assert "IPv6" in cli.build_parser().format_help()


def test_resolve_config_from_target_with_overrides():
    args = cli.build_parser().parse_args(
        ["10.0.0.1:27016", "--timeout", "1.5", "--local-port", "0"]
    )

    config = cli.resolve_config(args)

    assert config.server_address == ("10.0.0.1", 27016)
    assert config.timeout == 1.5
    assert config.local_port == 0


def test_resolve_config_from_toml(tmp_path):
    path = tmp_path / "servers.toml"
    path.write_text('[profile.tf2]\nhost = "5.6.7.8"\nlocal_port = 7000\n', encoding="utf-8")
    args = cli.build_parser().parse_args(["-c", str(path), "--profile", "tf2"])

    config = cli.resolve_config(args)

    assert config.host == "5.6.7.8"
    assert config.local_port == 7000


def test_format_info_includes_optional_fields():
    text = cli.format_info(_info(port=27015, keywords="payload,alltalk"))

    assert "Name:     Test Server" in text
    assert "Players:  12/24 (0 bots)" in text
    assert "Password: yes" in text
    assert "Port:     27015" in text
    assert "Keywords: payload,alltalk" in text
    assert "SteamID" not in text


def test_format_players():
    players = [QueryPlayer(0, "Alice", 12, 3725.0), QueryPlayer(1, "Bob", -3, 59.9)]

    lines = cli.format_players(players).splitlines()

    assert lines[0].endswith("1:02:05")
    assert "Bob" in lines[1]
    assert lines[1].endswith("0:00:59")
    assert cli.format_players([]) == "(no players)"


def test_format_rules_sorted():
    assert cli.format_rules({"b": "2", "a": "1"}) == "a = 1\nb = 2"
    assert cli.format_rules({}) == "(no rules)"


def test_main_config_error_returns_2(capsys):
    assert cli.main(["10.0.0.1:bad"]) == 2
    assert "配置错误" in capsys.readouterr().err


def test_main_defaults_to_info():
    with patch.object(cli.asyncio, "run"):
        with patch.object(cli, "run_query") as run_query:
            assert cli.main(["10.0.0.1"]) == 0

    config, info, players, rules = run_query.call_args.args
    assert config.host == "10.0.0.1"
    assert (info, players, rules) == (True, False, False)


def test_main_timeout_returns_1(capsys):
    with patch.object(cli.asyncio, "run", side_effect=TimeoutError):
        with patch.object(cli, "run_query"):
            assert cli.main(["10.0.0.1", "--players"]) == 1
    assert "超时" in capsys.readouterr().err
