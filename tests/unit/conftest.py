"""Shared fixtures for unit tests."""

from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ascbridge.xcode_cloud.models.config import AppStoreConnectConfig


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """Generate a P-256 key like the ones App Store Connect issues."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def public_key_pem(ec_private_key: ec.EllipticCurvePrivateKey) -> str:
    """PEM encoded public half of the test key."""
    return (
        ec_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


@pytest.fixture
def key_file(tmp_path: Path, ec_private_key: ec.EllipticCurvePrivateKey) -> Path:
    """Write the test key as a PKCS#8 .p8 file."""
    path = tmp_path / "AuthKey_TESTKEY123.p8"
    path.write_bytes(
        ec_private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture
def config(key_file: Path) -> AppStoreConnectConfig:
    """Create test App Store Connect configuration."""
    return AppStoreConnectConfig(
        key_id="TESTKEY123",
        issuer_id="69a6de7f-1234-47e3-e053-5b8c7c11a4d1",
        p8_path=key_file,
        _env_file=None,  # type: ignore[call-arg]
    )
