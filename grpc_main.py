import asyncio

from core.config import settings
from core.logging_config import get_logger
from grpc_app.server import create_server


logger = get_logger(__name__)


async def main() -> None:
    if not settings.grpc.enabled:
        logger.warning("grpc_disabled", message="gRPC disabled by config (GRPC__ENABLED=false)")
        return

    server, port = await create_server()
    logger.info("grpc_starting", host=settings.grpc.host, port=port)
    await server.start()
    logger.info("grpc_started", host=settings.grpc.host, port=port)
    try:
        await server.wait_for_termination()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("grpc_stopping")
        await server.stop(grace=settings.grpc.grace_seconds)


if __name__ == "__main__":
    asyncio.run(main())
