# src/a2s_core/cli.py
"""
a2s-query 命令行入口

查询单个服务器的信息、玩家与规则并打印到终端。
超时由这里 (调用方) 用 asyncio.wait_for 实现，核心层本身没有超时。
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    DEFAULT_QUERY_PORT,
    QueryConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)
from .core import QueryConnection
from .exceptions import A2SError, ConfigError
from .models import QueryPlayer, ServerInfo

logger = logging.getLogger("a2s_query")


def build_parser() -> argparse.ArgumentParser:
    """构建参数解析器。"""
    parser = argparse.ArgumentParser(
        prog="a2s-query",
        description="A2S (Source engine) server query client",
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="host[:port]，仅支持 IPv4 地址或主机名 (不支持 IPv6)；省略时从配置文件或 A2S_ 环境变量读取",
    )
    parser.add_argument("-c", "--config", type=Path, help="TOML 配置文件")
    parser.add_argument("--profile", default="default", help="配置预设名")
    parser.add_argument("--env-file", type=Path, help=".env 文件")
    parser.add_argument("--info", action="store_true", help="查询服务器信息")
    parser.add_argument("--players", action="store_true", help="查询玩家列表")
    parser.add_argument("--rules", action="store_true", help="查询服务器规则")
    parser.add_argument("--timeout", type=float, help="单次查询超时 (秒)")
    parser.add_argument("--local-port", type=int, help="本地 UDP 端口 (0 = 自动)")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_target(target: str) -> dict[str, object]:
    """将 host[:port] 拆分为配置字典。

    地址解析仅支持 IPv4，IPv6 地址 (含 [addr]:port 形式) 直接拒绝。
    """
    if target.startswith("[") or target.count(":") > 1:
        raise ConfigError(f"不支持 IPv6 地址: {target}")
    if target.count(":") == 1:
        host, port_str = target.rsplit(":", 1)
        if not port_str.isdigit():
            raise ConfigError(f"端口格式无效: {target}")
        return {"host": host, "port": int(port_str)}
    return {"host": target, "port": DEFAULT_QUERY_PORT}


def resolve_config(args: argparse.Namespace) -> QueryConfig:
    """按 命令行 > TOML > 环境变量 的优先级得到配置。"""
    if args.target:
        raw: dict[str, object] = parse_target(args.target)
    elif args.config:
        raw = vars(load_config_from_toml(args.config, args.profile)).copy()
    else:
        raw = vars(load_config_from_env(args.env_file)).copy()

    if args.timeout is not None:
        raw["timeout"] = args.timeout
    if args.local_port is not None:
        raw["local_port"] = args.local_port
    return create_config_from_dict(raw)


def format_info(info: ServerInfo) -> str:
    lines = [
        f"Name:     {info.name}",
        f"Map:      {info.map}",
        f"Game:     {info.game} ({info.folder}, app {info.app_id})",
        f"Players:  {info.players}/{info.max_players} ({info.bots} bots)",
        f"Type:     {info.server_type.name.lower()} / {info.os.name.lower()}",
        f"Password: {'yes' if info.password_protected else 'no'}",
        f"VAC:      {info.vac.name.lower()}",
        f"Version:  {info.version}",
    ]
    if info.port is not None:
        lines.append(f"Port:     {info.port}")
    if info.steam_id is not None:
        lines.append(f"SteamID:  {info.steam_id}")
    if info.tv_port is not None:
        lines.append(f"SourceTV: {info.tv_name} (port {info.tv_port})")
    if info.keywords:
        lines.append(f"Keywords: {info.keywords}")
    if info.game_id is not None:
        lines.append(f"GameID:   {info.game_id}")
    return "\n".join(lines)


def format_players(players: list[QueryPlayer]) -> str:
    if not players:
        return "(no players)"
    width = max(len(p.name) for p in players)
    rows = []
    for p in players:
        minutes, seconds = divmod(int(p.duration), 60)
        hours, minutes = divmod(minutes, 60)
        rows.append(
            f"{p.index:>3}  {p.name:<{width}}  {p.score:>6}  "
            f"{hours:d}:{minutes:02d}:{seconds:02d}"
        )
    return "\n".join(rows)


def format_rules(rules: dict[str, str]) -> str:
    if not rules:
        return "(no rules)"
    return "\n".join(f"{k} = {v}" for k, v in sorted(rules.items()))


async def run_query(config: QueryConfig, info: bool, players: bool, rules: bool) -> None:
    """连接并执行请求，按顺序打印结果。"""
    async with await QueryConnection.from_config(config) as conn:
        if info:
            result = await asyncio.wait_for(conn.get_info(), config.timeout)
            print(format_info(result))
        if players:
            result = await asyncio.wait_for(conn.get_players(), config.timeout)
            print(f"\n== Players ({len(result)}) ==")
            print(format_players(result))
        if rules:
            result = await asyncio.wait_for(conn.get_rules(), config.timeout)
            print(f"\n== Rules ({len(result)}) ==")
            print(format_rules(result))


def main(argv: list[str] | None = None) -> int:
    """命令行主入口。"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )

    # 未指定任何查询时默认只查信息
    want_info = args.info or not (args.players or args.rules)

    try:
        config = resolve_config(args)
        logger.debug(f"配置加载完成: {config}")
        asyncio.run(run_query(config, want_info, args.players, args.rules))
    except ConfigError as e:
        print(f"配置错误: {e}", file=sys.stderr)
        return 2
    except asyncio.TimeoutError:
        print("查询超时: 服务器无响应", file=sys.stderr)
        return 1
    except A2SError as e:
        print(f"查询失败: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
