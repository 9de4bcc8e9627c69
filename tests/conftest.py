import os
from typing import Generator

import pytest
import yaml

from tests.fake.fake_prober import FakeProber
from tests.fake.fake_serializer import JsonSerializer
from tests.utils import generate_cert_pair, write_pem

from ringctl.bootstrap.config.settings import TLSSettings


@pytest.fixture
def serializer():
    return JsonSerializer()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture(scope="session")
def tls_settings(tmp_path_factory) -> TLSSettings:
    ca_cert, client_key, client_cert = generate_cert_pair()
    base = tmp_path_factory.mktemp("mtls")

    write_pem(ca_cert, base / "ca.pem")
    write_pem(client_cert, base / "client.pem")
    write_pem(client_key, base / "client.key")

    return TLSSettings(
        certfile=base / "client.pem",
        keyfile=base / "client.key",
        cafile=base / "ca.pem"
    )


@pytest.fixture
def config_file(tmp_path, tls_settings):
    file = tmp_path / "ringwatch.yaml"

    data = {
        "seed": "store-1:4242",
        "probe": {
            "timeout": 2.5,
            "max_retries": 3,
            "concurrency": 4,
        },
        "tls": {
            "certfile": str(tls_settings.certfile),
            "keyfile": str(tls_settings.keyfile),
            "cafile": str(tls_settings.cafile),
        },
    }

    file.write_text(yaml.dump(data))
    return file


@pytest.fixture
def config_env(config_file) -> Generator[str, None, None]:
    backup = os.environ.copy()

    try:
        os.environ["TEST_RINGWATCHCONFIG"] = str(config_file)
        yield str(config_file)
    finally:
        os.environ.clear()
        os.environ.update(backup)
