import json
from functools import lru_cache

from pydantic import ValidationError

from ringctl.bootstrap.config.settings import ProbeSettings, RingwatchConfig
from ringctl.core.dispatcher import CommandDispatcher
from ringctl.core.ports.render import Renderer
from ringctl.infra.format_renderer import JsonRenderer, YamlRenderer
from ringwatch.core.connections.prober import MessageProber
from ringwatch.core.service.topology import TopologyCache
from ringwatch.core.throttling.backoff import ExponentialBackoff
from ringwatch.infra.msgpack_serializer import MsgPackSerializer


@lru_cache
def get_config() -> RingwatchConfig:
    try:
        return RingwatchConfig()
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


@lru_cache
def get_prober() -> MessageProber:
    config = get_config()
    return MessageProber(
        serializer=MsgPackSerializer(),
        ssl_context=config.get_client_ssl_ctx(),
        timeout=config.probe.timeout,
        max_retries=config.probe.max_retries,
        max_message_size=config.probe.max_message_size,
    )


def probe_budget(probe: ProbeSettings) -> float:
    """Time a whole probe may take: every attempt plus the sleeps between them."""
    sleeps = ExponentialBackoff().worst_case_delay(probe.max_retries - 1)
    return probe.timeout * probe.max_retries + sleeps + 1.0


@lru_cache
def get_topology_cache() -> TopologyCache:
    config = get_config()
    return TopologyCache(
        prober=get_prober(),
        probe_timeout=probe_budget(config.probe),
        probe_concurrency=config.probe.concurrency,
    )


@lru_cache
def get_dispatcher() -> CommandDispatcher:
    return CommandDispatcher()


@lru_cache
def get_renderer(output: str) -> Renderer:
    if output == "json":
        return JsonRenderer()
    return YamlRenderer()
