import ssl
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from typing import Annotated
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from ringctl.bootstrap.config.loader import get_configfile
from ringwatch.core.helpers.addr import split_host_port


class ProbeSettings(BaseModel):
    timeout: Annotated[
        float,
        Field(
            description=(
                "Maximum time (in seconds) a single daemon may take to describe its ring.\n"
                "A seed exceeding it aborts discovery; a peer exceeding it is reported "
                "as unreachable."
            ),
            default=5.0,
            gt=0,
        )
    ]

    max_retries: Annotated[
        int,
        Field(
            description="Connection attempts per daemon before giving up.",
            default=2,
            ge=1,
        )
    ]

    concurrency: Annotated[
        int,
        Field(
            description="Maximum number of peers probed at the same time.",
            default=8,
            ge=1,
        )
    ]

    max_message_size: Annotated[
        int,
        Field(
            description="Maximum size of a ring description reply.",
            default=1 * 1024 * 1024,
            gt=0,
        )
    ]


class TLSSettings(BaseModel):
    certfile: Annotated[
        Path,
        Field(description="Path to the client TLS certificate (PEM).")
    ]

    keyfile: Annotated[
        Path,
        Field(description="Path to the client TLS private key (PEM).")
    ]

    cafile: Annotated[
        Path,
        Field(
            description=(
                "Path to the CA certificate (PEM) used to verify the daemons' "
                "certificates."
            )
        )
    ]

    @field_validator("certfile", "keyfile", "cafile")
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Path {v} does not exist.")
        return v


class RingwatchConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RINGWATCH_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    seed: Annotated[
        str | None,
        Field(
            description=(
                "Default seed daemon (host:port) used when --seed is not given.\n"
                "The seed's ring is the reference every other daemon is checked against."
            ),
            default=None
        )
    ]

    probe: Annotated[
        ProbeSettings,
        Field(
            description="How daemons are asked for their ring.",
            default_factory=ProbeSettings
        )
    ]

    tls: Annotated[
        TLSSettings | None,
        Field(
            description=(
                "Mutual TLS material presented to the daemons.\n"
                "Plain TCP is used when omitted."
            ),
            default=None
        )
    ]

    @field_validator("seed")
    @classmethod
    def validate_seed(cls, v: str | None) -> str | None:
        if v is not None:
            split_host_port(v)
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )

    def get_client_ssl_ctx(self) -> ssl.SSLContext | None:
        if self.tls is None:
            return None

        ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        ctx.load_cert_chain(
            certfile=self.tls.certfile,
            keyfile=self.tls.keyfile
        )
        ctx.verify_mode = ssl.CERT_REQUIRED
        ctx.load_verify_locations(cafile=self.tls.cafile)

        return ctx
