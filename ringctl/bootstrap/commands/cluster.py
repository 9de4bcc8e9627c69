import argparse

from ringctl.bootstrap.deps import get_dispatcher
from ringwatch.core.models.cluster import ClusterConfig
from ringwatch.core.models.message import Message

dispatcher = get_dispatcher()


@dispatcher.command("servers")
def servers(cluster: ClusterConfig, _: argparse.Namespace) -> Message:
    return Message(
        type="ok",
        data={
            "port": cluster.port,
            "servers": cluster.host_ports(),
            "healthy": cluster.healthy,
        }
    )


@dispatcher.command("health")
def health(cluster: ClusterConfig, _: argparse.Namespace) -> Message:
    return Message(
        type="ok" if cluster.healthy else "ko",
        data={"seed": cluster.seed, **cluster.report.to_dict()}
    )


@dispatcher.command("ring")
def ring(cluster: ClusterConfig, _: argparse.Namespace) -> Message:
    return Message(
        type="ok",
        data={
            "algorithm": cluster.algorithm,
            "replicas": cluster.replicas,
            "nodes": [str(node) for node in cluster.hash_ring.nodes],
        }
    )


@dispatcher.command("locate")
def locate(cluster: ClusterConfig, namespace: argparse.Namespace) -> Message:
    if not getattr(namespace, "key", None):
        raise ValueError("key is required.")

    node = cluster.hash_ring.get_node(namespace.key)
    return Message(
        type="ok",
        data={
            "key": namespace.key,
            "node": str(node),
            "server": f"{node.name}:{cluster.port}",
        }
    )
