"""The User-Agent / Server string sent during handshakes."""

from __future__ import annotations

import ssl
import sys
import zlib

_VERSION = "0.1.0"

_BSD_PREFIXES = ("freebsd", "openbsd", "netbsd", "dragonfly")


def platform_name() -> str:
    """Return a short name for the operating system the code runs on."""
    plat = sys.platform
    if plat in ("win32", "cygwin", "msys"):
        return "windows"
    if plat == "android" or (plat.startswith("linux") and hasattr(sys, "getandroidapilevel")):
        return "android"
    if plat.startswith("linux"):
        return "linux"
    if plat.startswith(_BSD_PREFIXES):
        return "bsd"
    if plat.startswith("hp-ux"):
        return "hp-ux"
    if plat.startswith("aix"):
        return "aix"
    if plat == "ios":
        return "ios"
    if plat == "darwin":
        return "macos"
    if plat.startswith("sunos"):
        return "solaris"
    return "unknown platform"


def user_agent() -> str:
    """Return the library name and version, platform, TLS and zlib versions."""
    return (
        f"wsnet/{_VERSION} {platform_name()}"
        f" ssl/OpenSSL {ssl.OPENSSL_VERSION}"
        f" zlib {zlib.ZLIB_VERSION}"
    )