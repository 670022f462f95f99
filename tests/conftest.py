"""Root test configuration: shared vault fixtures and export-guard reset"""

import pytest

from kindlepdf.config import Settings
from kindlepdf.core.pipeline import Exporter
from kindlepdf.vault.memory import MemoryVault


# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6300010000000500010d0a2db40000000049454e44ae426082"
)


@pytest.fixture(name="png_bytes")
def png_bytes_fixture():
    return PNG_BYTES


@pytest.fixture(autouse=True)
def reset_export_guard():
    """Never leak the process-wide in-flight flag between tests."""
    Exporter._exporting = False
    yield
    Exporter._exporting = False


@pytest.fixture(name="vault")
def vault_fixture():
    return MemoryVault()


@pytest.fixture(name="settings")
def settings_fixture():
    """Settings with every required email/SMTP field filled in."""
    return Settings(
        sender_email="me@example.com",
        kindle_email="me@kindle.com",
        smtp_host="smtp.example.com",
        smtp_port="587",
        smtp_user="me@example.com",
        smtp_pass="secret",
    )
