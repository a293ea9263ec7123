# -*- coding: utf-8 -*-
"""
Minimal timestamped logger for workflows and the CLI.

Messages go to stdout (info/debug) or stderr (warn/error); debug lines are
printed only after set_verbose(True), which the CLI does for --debug.
"""
import sys, time

_VERBOSE = False

def set_verbose(flag: bool) -> None:
    global _VERBOSE
    _VERBOSE = bool(flag)

def _stamp() -> str:
    return time.strftime('%H:%M:%S')

def debug(msg: str):
    if _VERBOSE:
        print(f"[{_stamp()}] DEBUG: {msg}", file=sys.stdout)

def info(msg: str):  print(f"[{_stamp()}] {msg}", file=sys.stdout)
def warn(msg: str):  print(f"[{_stamp()}] WARNING: {msg}", file=sys.stderr)
def error(msg: str): print(f"[{_stamp()}] ERROR: {msg}", file=sys.stderr)
