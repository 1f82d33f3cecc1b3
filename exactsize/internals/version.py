from __future__ import annotations
import sys, platform

from exactsize import __version__ as app_ver, __dev__ as is_dev

def _ensure_utf8_stdout() -> None:
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        try:
            reconfigure(encoding="utf-8")
        except (ValueError, OSError):
            pass

def _get_versions() -> dict[str, str]:

    # lark + llvmlite (best-effort; don't crash if metadata is missing)
    lark_ver = "unknown"
    llvmlite_ver = "unknown"
    try:
        import lark
        lark_ver = getattr(lark, "__version__", "unknown")
    except ImportError:
        pass
    try:
        import llvmlite
        llvmlite_ver = getattr(llvmlite, "__version__", "unknown")
    except ImportError:
        pass

    return {
        "app": app_ver,
        "python": platform.python_version(),
        "lark": lark_ver,
        "llvmlite": llvmlite_ver,
    }

def version_line() -> str:
    v = _get_versions()
    dev_marker = " (dev)" if is_dev else ""
    return f"exactsize {v['app']}{dev_marker}"

def print_banner(stream=None) -> None:
    _ensure_utf8_stdout()
    stream = stream or sys.stdout
    v = _get_versions()

    # Only use ANSI styling if the stream is a TTY (interactive terminal)
    use_ansi = getattr(stream, "isatty", lambda: False)()

    if use_ansi:
        BOLD, DIM, RESET = "\x1b[1m", "\x1b[2m", "\x1b[0m"
    else:
        BOLD, DIM, RESET = "", "", ""

    print(
        f"{BOLD}{version_line()}{RESET}\n"
        f"{DIM}Python {v['python']} • lark {v['lark']} • llvmlite {v['llvmlite']}{RESET}\n",
        file=stream,
    )
