"""Creation of TLS contexts for client and server sockets from :class:`SocketTLSOptions`."""

from __future__ import annotations

import re
import ssl

from .tls_options import SocketTLSOptions

DEFAULT_CIPHERS = (
    "ECDHE-ECDSA-AES128-GCM-SHA256 ECDHE-ECDSA-AES256-GCM-SHA384 ECDHE-ECDSA-AES128-SHA "
    "ECDHE-ECDSA-AES256-SHA ECDHE-ECDSA-AES128-SHA256 ECDHE-ECDSA-AES256-SHA384 "
    "ECDHE-RSA-AES128-GCM-SHA256 ECDHE-RSA-AES256-GCM-SHA384 ECDHE-RSA-AES128-SHA "
    "ECDHE-RSA-AES256-SHA ECDHE-RSA-AES128-SHA256 ECDHE-RSA-AES256-SHA384 "
    "DHE-RSA-AES128-GCM-SHA256 DHE-RSA-AES256-GCM-SHA384 DHE-RSA-AES128-SHA "
    "DHE-RSA-AES256-SHA DHE-RSA-AES128-SHA256 DHE-RSA-AES256-SHA256 AES128-SHA"
)

_PEM_CERTIFICATE = re.compile(
    r"-----BEGIN (?:TRUSTED )?CERTIFICATE-----.*?-----END (?:TRUSTED )?CERTIFICATE-----",
    re.DOTALL,
)

_PREFIX = "OpenSSL failed - "


class TLSError(Exception):
    """Raised when a TLS context cannot be set up or a TLS operation fails."""


def _detail(error: BaseException) -> str:
    strerror = getattr(error, "strerror", None)
    return strerror if strerror else str(error)


def describe_ssl_error(error: BaseException) -> str:
    """Return a human-readable description of a failed TLS operation."""
    if isinstance(error, ssl.SSLZeroReturnError):
        return _PREFIX + "err zero return"
    if isinstance(error, ssl.SSLEOFError):
        return _PREFIX + "received early EOF"
    if isinstance(error, ssl.SSLSyscallError):
        return _PREFIX + "underlying BIO reported an I/O error"
    if isinstance(error, (ssl.SSLWantReadError, ssl.SSLWantWriteError)):
        return _PREFIX + "unknown error"
    if isinstance(error, ssl.SSLError):
        return _PREFIX + _detail(error)
    if isinstance(error, OSError):
        if error.errno:
            return _PREFIX + _detail(error)
        return _PREFIX + "underlying BIO reported an I/O error"
    return _PREFIX + "unknown error"


def add_ca_roots_from_string(context: ssl.SSLContext, roots: str) -> int:
    """Trust every PEM certificate found in ``roots`` and return how many were read.

    Intermediate certificates are accepted as trust anchors.  Certificates
    already trusted are not an error.  Raises :class:`TLSError` if a
    certificate cannot be loaded or none is found.
    """
    context.verify_flags |= ssl.VERIFY_X509_TRUSTED_FIRST | ssl.VERIFY_X509_PARTIAL_CHAIN
    count = 0
    for block in _PEM_CERTIFICATE.findall(roots):
        try:
            context.load_verify_locations(cadata=block)
        except (ssl.SSLError, ValueError) as exc:
            raise TLSError(f"{_PREFIX}cannot add CA root: {_detail(exc)}") from exc
        count += 1
    if count == 0:
        raise TLSError(_PREFIX + "no CA root certificate found")
    return count


def _load_cert_and_key(context: ssl.SSLContext, options: SocketTLSOptions) -> None:
    if not options.has_cert_and_key():
        return
    try:
        context.load_cert_chain(options.cert_file, options.key_file)
    except (ssl.SSLError, OSError) as exc:
        raise TLSError(
            f'{_PREFIX}SSL_CTX_use_certificate_chain_file("{options.cert_file}") / '
            f'SSL_CTX_use_PrivateKey_file("{options.key_file}") failed: {_detail(exc)}'
        ) from exc


def _load_trust(
    context: ssl.SSLContext, options: SocketTLSOptions, purpose: ssl.Purpose
) -> None:
    if options.is_using_system_defaults():
        try:
            context.load_default_certs(purpose)
        except (ssl.SSLError, OSError) as exc:
            raise TLSError(
                f"{_PREFIX}SSL_CTX_default_verify_paths loading failed: {_detail(exc)}"
            ) from exc
    elif options.is_using_in_memory_cas():
        add_ca_roots_from_string(context, options.ca_file)
    else:
        try:
            context.load_verify_locations(cafile=options.ca_file)
        except (ssl.SSLError, OSError, ValueError) as exc:
            raise TLSError(
                f'{_PREFIX}SSL_CTX_load_verify_locations("{options.ca_file}") failed: '
                f"{_detail(exc)}"
            ) from exc


def _set_ciphers(context: ssl.SSLContext, options: SocketTLSOptions) -> None:
    ciphers = DEFAULT_CIPHERS if options.is_using_default_ciphers() else options.ciphers
    try:
        context.set_ciphers(ciphers)
    except ssl.SSLError as exc:
        raise TLSError(
            f'{_PREFIX}SSL_CTX_set_cipher_list("{ciphers}") failed: {_detail(exc)}'
        ) from exc


def create_client_context(options: SocketTLSOptions) -> ssl.SSLContext:
    """Return a client context configured from ``options``.

    The peer certificate is verified unless ``ca_file`` is ``"NONE"``, and
    the host name is checked unless hostname validation is disabled.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.options |= ssl.OP_NO_SSLv2 | ssl.OP_NO_SSLv3 | ssl.OP_CIPHER_SERVER_PREFERENCE

    _load_cert_and_key(context, options)

    if options.is_peer_verify_disabled():
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    else:
        _load_trust(context, options, ssl.Purpose.SERVER_AUTH)
        context.verify_mode = ssl.CERT_REQUIRED
        context.check_hostname = not options.disable_hostname_validation

    _set_ciphers(context, options)
    return context


def create_server_context(options: SocketTLSOptions) -> ssl.SSLContext:
    """Return a server context configured from ``options``.

    Clients must present a certificate unless ``ca_file`` is ``"NONE"``.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.options |= ssl.OP_ALL | ssl.OP_NO_SSLv2 | ssl.OP_NO_SSLv3

    _load_cert_and_key(context, options)

    if options.is_peer_verify_disabled():
        context.verify_mode = ssl.CERT_NONE
    else:
        _load_trust(context, options, ssl.Purpose.CLIENT_AUTH)
        context.verify_mode = ssl.CERT_REQUIRED

    _set_ciphers(context, options)
    return context