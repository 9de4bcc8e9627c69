import asyncio
import logging

from ringctl.bootstrap.config.loader import get_cli_args
from ringctl.bootstrap.deps import get_config, get_topology_cache, get_dispatcher, get_renderer
from ringwatch.core.errors import RingwatchError
from ringwatch.core.helpers.utils import setup_logging, scan


@scan("ringctl.bootstrap.commands")
def main():
    args = get_cli_args()
    setup_logging(args.log_level)
    logger = logging.getLogger("ringctl")

    config = get_config()
    seed = args.seed or config.seed
    if not seed:
        raise SystemExit(
            "No seed daemon given.\n"
            "  - Use --seed <host:port>\n"
            "  - Or set 'seed' in the configuration file"
        )

    try:
        cluster = asyncio.run(get_topology_cache().get_cluster_config(seed))
    except RingwatchError as ex:
        logger.debug("Discovery failed", exc_info=ex)
        raise SystemExit(f"Abort: {ex}")

    try:
        message = get_dispatcher().dispatch(args.command, cluster=cluster, namespace=args)
    except (LookupError, ValueError) as ex:
        raise SystemExit(str(ex))

    print(get_renderer(args.output).render(message.data))
    if message.type != "ok":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
