"""Pytest fixtures for httpsupload tests."""
import datetime
import os
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


class RecordingObserver:
    """Observer that records every callback."""

    def __init__(self):
        self.starts: List[Tuple[int, int]] = []
        self.progress: List[Tuple[Optional[Path], Optional[int], int]] = []
        self.ends: List[Tuple[int, int]] = []

    def upload_start(self, item_count, total_bytes):
        self.starts.append((item_count, total_bytes))

    def upload_progress(self, file, total_size, pct):
        self.progress.append((file, total_size, pct))

    def upload_end(self, bytes_sent, elapsed_ms):
        self.ends.append((bytes_sent, elapsed_ms))

    def percentages(self, file=None) -> List[int]:
        """Returns reported percentages, optionally for one file only."""
        return [pct for f, _, pct in self.progress if file is None or f == file]


@dataclass
class CertificateFiles:
    """A throwaway certificate and its key."""
    cert_path: Path
    key_path: Path
    der: bytes

    def server_context(self) -> ssl.SSLContext:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(str(self.cert_path), str(self.key_path))
        return context


def build_certificate(directory: Path, issuer_attributes) -> CertificateFiles:
    """Create a certificate for localhost with the given issuer attributes."""
    key = ec.generate_private_key(ec.SECP256R1())
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")]))
        .issuer_name(x509.Name(issuer_attributes))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )

    cert_path = directory / "cert.pem"
    key_path = directory / "key.pem"
    cert_path.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption()
    ))
    return CertificateFiles(
        cert_path=cert_path,
        key_path=key_path,
        der=certificate.public_bytes(serialization.Encoding.DER)
    )


def issuer(organization: Optional[str] = None, common_name: str = "Test CA"):
    """Build issuer name attributes."""
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
    if organization is not None:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    return attributes


@pytest.fixture
def observer():
    """Returns a recording progress observer."""
    return RecordingObserver()


@pytest.fixture
def make_file(tmp_path):
    """Factory creating files of a given size with deterministic content."""
    def _make(name: str, size: int) -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path
    return _make


@pytest.fixture
def acme_certificate(tmp_path):
    """Certificate issued by Organization 'Acme'."""
    return build_certificate(tmp_path, issuer("Acme"))


@pytest.fixture
def other_certificate(tmp_path):
    """Certificate issued by Organization 'Other'."""
    return build_certificate(tmp_path, issuer("Other"))


@pytest.fixture
def no_org_certificate(tmp_path):
    """Certificate whose issuer has no Organization attribute."""
    return build_certificate(tmp_path, issuer(None))


@pytest.fixture
def random_bytes():
    """Factory for random payloads."""
    return os.urandom
