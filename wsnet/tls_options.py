"""TLS settings shared by client and server sockets."""

from __future__ import annotations

from dataclasses import dataclass, field

TLS_CA_FILE_USE_SYSTEM_DEFAULTS = "SYSTEM"
TLS_CA_FILE_DISABLE_VERIFY = "NONE"
TLS_CIPHERS_USE_DEFAULT = "DEFAULT"
TLS_IN_MEMORY_MARKER = "-----BEGIN CERTIFICATE-----"


class TLSOptionsError(ValueError):
    """Raised when TLS options refer to missing files or are inconsistent."""


def _is_readable(path: str) -> bool:
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


@dataclass
class SocketTLSOptions:
    """Certificate, key, CA and cipher settings for a TLS socket.

    ``ca_file`` may be a path, ``"SYSTEM"`` for the system trust store,
    ``"NONE"`` to disable peer verification, or PEM text holding the
    certificates themselves.
    """

    cert_file: str = ""
    key_file: str = ""
    ca_file: str = TLS_CA_FILE_USE_SYSTEM_DEFAULTS
    ciphers: str = TLS_CIPHERS_USE_DEFAULT
    tls: bool = False
    disable_hostname_validation: bool = False
    _validated: bool = field(default=False, init=False, repr=False, compare=False)

    def validate(self) -> None:
        """Check that the named files exist; raise :class:`TLSOptionsError` if not.

        A successful check is remembered and not repeated.
        """
        if self._validated:
            return
        if self.cert_file and not _is_readable(self.cert_file):
            raise TLSOptionsError(f"certFile not found: {self.cert_file}")
        if self.key_file and not _is_readable(self.key_file):
            raise TLSOptionsError(f"keyFile not found: {self.key_file}")
        if (
            self.ca_file
            and self.ca_file not in (TLS_CA_FILE_DISABLE_VERIFY, TLS_CA_FILE_USE_SYSTEM_DEFAULTS)
            and not _is_readable(self.ca_file)
        ):
            raise TLSOptionsError(f"caFile not found: {self.ca_file}")
        if bool(self.cert_file) != bool(self.key_file):
            raise TLSOptionsError("certFile and keyFile must be both present, or both absent")
        self._validated = True

    def is_valid(self) -> bool:
        try:
            self.validate()
        except TLSOptionsError:
            return False
        return True

    def has_cert_and_key(self) -> bool:
        return bool(self.cert_file) and bool(self.key_file)

    def is_using_system_defaults(self) -> bool:
        return self.ca_file == TLS_CA_FILE_USE_SYSTEM_DEFAULTS

    def is_using_in_memory_cas(self) -> bool:
        return TLS_IN_MEMORY_MARKER in self.ca_file

    def is_peer_verify_disabled(self) -> bool:
        return self.ca_file == TLS_CA_FILE_DISABLE_VERIFY

    def is_using_default_ciphers(self) -> bool:
        return not self.ciphers or self.ciphers == TLS_CIPHERS_USE_DEFAULT

    def description(self) -> str:
        """Return a multi-line, human-readable summary of the options."""
        return (
            "TLS Options:\n"
            f"  certFile = {self.cert_file}\n"
            f"  keyFile  = {self.key_file}\n"
            f"  caFile   = {self.ca_file}\n"
            f"  ciphers  = {self.ciphers}\n"
            f"  tls      = {int(self.tls)}\n"
        )