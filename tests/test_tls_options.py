import pytest

from wsnet.tls_options import SocketTLSOptions, TLSOptionsError


@pytest.fixture
def pem_files(tmp_path):
    cert = tmp_path / "cert.pem"
    key = tmp_path / "key.pem"
    ca = tmp_path / "ca.pem"
    for path in (cert, key, ca):
        path.write_text("placeholder\n")
    return str(cert), str(key), str(ca)


def test_defaults():
    options = SocketTLSOptions()
    assert options.ca_file == "SYSTEM"
    assert options.ciphers == "DEFAULT"
    assert options.is_using_system_defaults() is True
    assert options.is_using_default_ciphers() is True
    assert options.has_cert_and_key() is False
    assert options.is_peer_verify_disabled() is False
    assert options.is_valid() is True


def test_peer_verify_disabled():
    options = SocketTLSOptions(ca_file="NONE")
    assert options.is_peer_verify_disabled() is True
    assert options.is_using_system_defaults() is False
    assert options.is_valid() is True


def test_in_memory_cas_detected():
    options = SocketTLSOptions(ca_file="-----BEGIN CERTIFICATE-----\nplaceholder\n")
    assert options.is_using_in_memory_cas() is True
    assert SocketTLSOptions().is_using_in_memory_cas() is False


@pytest.mark.parametrize(("ciphers", "expected"), [("", True), ("DEFAULT", True), ("AES128-SHA", False)])
def test_default_ciphers(ciphers, expected):
    assert SocketTLSOptions(ciphers=ciphers).is_using_default_ciphers() is expected


def test_missing_cert_file(tmp_path):
    missing = str(tmp_path / "nope.pem")
    options = SocketTLSOptions(cert_file=missing, key_file=missing)
    with pytest.raises(TLSOptionsError, match="certFile not found: "):
        options.validate()
    assert options.is_valid() is False


def test_missing_key_file(pem_files, tmp_path):
    cert, _, _ = pem_files
    missing = str(tmp_path / "nope.pem")
    options = SocketTLSOptions(cert_file=cert, key_file=missing)
    with pytest.raises(TLSOptionsError) as info:
        options.validate()
    assert str(info.value) == "keyFile not found: " + missing


def test_missing_ca_file(tmp_path):
    missing = str(tmp_path / "nope.pem")
    options = SocketTLSOptions(ca_file=missing)
    with pytest.raises(TLSOptionsError) as info:
        options.validate()
    assert str(info.value) == "caFile not found: " + missing


def test_cert_without_key(pem_files):
    cert, _, _ = pem_files
    options = SocketTLSOptions(cert_file=cert)
    with pytest.raises(TLSOptionsError) as info:
        options.validate()
    assert str(info.value) == "certFile and keyFile must be both present, or both absent"


def test_all_files_present(pem_files):
    cert, key, ca = pem_files
    options = SocketTLSOptions(cert_file=cert, key_file=key, ca_file=ca)
    assert options.is_valid() is True
    assert options.has_cert_and_key() is True


def test_validation_is_cached(pem_files, tmp_path):
    cert, key, ca = pem_files
    options = SocketTLSOptions(cert_file=cert, key_file=key, ca_file=ca)
    assert options.is_valid() is True
    (tmp_path / "cert.pem").unlink()
    assert options.is_valid() is True


def test_description():
    options = SocketTLSOptions(tls=True)
    text = options.description()
    lines = text.splitlines()
    assert lines[0] == "TLS Options:"
    assert "  caFile   = SYSTEM" in lines
    assert "  ciphers  = DEFAULT" in lines
    assert lines[-1].startswith("  tls      = ")
    assert lines[-1].endswith("1")
    assert text.endswith("\n")