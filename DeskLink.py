#!/usr/bin/env python3
"""
DeskLink.py

Command-line entry point for DeskLink.
Toggles auto-launch at login, shows resolved identity and paths,
provisions data paths and prints system information.
"""
from __future__ import annotations
import argparse
import json
import sys
from dataclasses import asdict

from core.autostart_manager import autostart_status, registry_for, set_autostart
from core.config import ensure_config, log_level
from core.errors import DeskLinkError
from core.logging import get_logger, init_logger, read_jsonl_tail, DEFAULT_LOG_FILENAME
from core.paths import PathManager, get_app_paths


def _emit(payload, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    if isinstance(payload, dict):
        for k, v in payload.items():
            print(f"  {k:<14}: {v}")
    elif isinstance(payload, list):
        for item in payload:
            print(f"  {item}")
    else:
        print(payload)


# ---------------------------------------------------------
# Sub-Command Handlers
# ---------------------------------------------------------
def cmd_show_paths(paths, as_json=False):
    """Print all resolved application paths."""
    if not as_json:
        print("\n[Resolved Application Paths]")
    _emit(paths.as_dict(), as_json)
    return 0


def cmd_show_identity(paths, as_json=False):
    registry = registry_for(paths)
    registry.ensure_ready()
    payload = {"os": registry.os_name, **asdict(registry.identity)}
    if not as_json:
        print("\n[Auto-launch Identity]")
    _emit(payload, as_json)
    return 0


def cmd_autostart_status(paths, as_json=False):
    enabled = autostart_status(paths)
    if as_json:
        _emit({"enabled": enabled}, True)
    else:
        print(f"Autostart is {'enabled' if enabled else 'disabled'}.")
    return 0


def cmd_data_path(paths, args):
    # paths.data_dir already honours DESKLINK_DEV and DESKLINK_DATA_DIR
    base = PathManager.as_directory(paths.data_dir)
    if args.data_file:
        pm = base.join_file(args.data_file)
    elif args.data_dir:
        pm = base.join_directory(args.data_dir)
    else:
        pm = base
    if args.ensure:
        pm = pm.ensure()
    _emit({"path": pm.into_string(), "kind": pm.kind.value}, args.json)
    return 0


def cmd_list_serial(as_json=False):
    from core.serialports import list_usb_serial_ports

    ports = [p.as_dict() for p in list_usb_serial_ports()]
    if as_json:
        _emit(ports, True)
    elif not ports:
        print("No USB serial ports found.")
    else:
        for p in ports:
            print(f"[{p['id']}] {p['label']}  ({p['description']})")
    return 0


def cmd_sysinfo(as_json=False):
    from core.sysinfo import get_system_snapshot

    snap = get_system_snapshot().as_dict()
    if as_json:
        _emit(snap, True)
        return 0
    networks = snap.pop("networks")
    print("\n[System]")
    _emit(snap, False)
    print("\n[Network Interfaces]")
    for n in networks:
        print(f"  [{n['id']}] {n['name']:<16} {n['mac'] or '-'}")
    return 0


def cmd_tail_logs(paths, n=20):
    """Print the last N lines of the JSON log."""
    log_path = paths.logs_dir / DEFAULT_LOG_FILENAME
    logs = read_jsonl_tail(log_path, max_lines=n)
    if not logs:
        print("(Log file is empty or missing)")
        return 0
    for item in logs:
        print(f"[{item.get('ts', '')}] {item.get('level', 'INFO')}: {item.get('msg', '')}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="DeskLink",
        description="DeskLink - desktop OS integration utilities.",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    grp_auto = parser.add_argument_group("Autostart")
    grp_auto.add_argument("--enable-autostart", action="store_true", help="Enable launching on system login")
    grp_auto.add_argument("--disable-autostart", action="store_true", help="Disable launching on system login")
    grp_auto.add_argument("--autostart-status", action="store_true", help="Show whether autostart is enabled")
    grp_auto.add_argument("--show-identity", action="store_true", help="Show the name/path registered for autostart")

    grp_paths = parser.add_argument_group("Paths")
    grp_paths.add_argument("--show-paths", action="store_true", help="Display all resolved file paths")
    grp_paths.add_argument("--data-file", metavar="NAME", help="Resolve <data>/<app>/NAME")
    grp_paths.add_argument("--data-dir", nargs="?", const="", metavar="CHILD", help="Resolve <data>/<app>[/CHILD]")
    grp_paths.add_argument("--ensure", action="store_true", help="Create the resolved data path if missing")

    grp_sys = parser.add_argument_group("System")
    grp_sys.add_argument("--list-serial", action="store_true", help="List USB serial ports")
    grp_sys.add_argument("--sysinfo", action="store_true", help="Show OS, memory and network information")
    grp_sys.add_argument("--tail-logs", type=int, nargs="?", const=20, metavar="N", help="Show last N log entries (default: 20)")

    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    return parser


# ---------------------------------------------------------
# Main Entry Point
# ---------------------------------------------------------
def main(argv=None):
    from core.logging import global_exception_hook
    sys.excepthook = global_exception_hook

    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.enable_autostart and args.disable_autostart:
        parser.error("--enable-autostart and --disable-autostart are mutually exclusive")

    bootstrap_paths = get_app_paths("DeskLink", ensure=False)
    cfg = ensure_config(bootstrap_paths.config_dir)
    paths = get_app_paths(cfg["app"]["name"], ensure=True)
    paths.config_dir = bootstrap_paths.config_dir

    init_logger(paths.logs_dir, console=cfg["logging"]["console"], level=log_level(cfg))
    logger = get_logger("cli")

    try:
        if args.enable_autostart:
            set_autostart(True, paths)
            return 0
        if args.disable_autostart:
            set_autostart(False, paths)
            return 0
        if args.autostart_status:
            return cmd_autostart_status(paths, args.json)
        if args.show_identity:
            return cmd_show_identity(paths, args.json)
        if args.show_paths:
            return cmd_show_paths(paths, args.json)
        if args.data_file or args.data_dir is not None:
            return cmd_data_path(paths, args)
        if args.list_serial:
            return cmd_list_serial(args.json)
        if args.sysinfo:
            return cmd_sysinfo(args.json)
        if args.tail_logs is not None:
            return cmd_tail_logs(paths, args.tail_logs)
    except DeskLinkError as e:
        logger.error(str(e), extra={"meta": {"error": type(e).__name__}})
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nAborted by user.")
        sys.exit(130)
