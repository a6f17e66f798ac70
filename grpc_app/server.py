from __future__ import annotations

from typing import Optional, Sequence
import grpc
from grpc_health.v1 import health, health_pb2_grpc, health_pb2

from core.config import settings
from core.logging_config import get_logger
from application.services.booking_service import BookingApplicationService
from infrastructure.repositories.booking_repository import InMemoryBookingRepository
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.exceptions import ExceptionMappingInterceptor
from grpc_app.handlers.booking import BookingHandler, BookingServiceV1
from grpc_app.schema import booking_v1
from grpc_app.services.booking_service import add_booking_service_to_server


logger = get_logger(__name__)

# Every published contract version stays registered; a booking.v2 goes next to v1
SERVED_CONTRACTS = (booking_v1.CONTRACT,)


def build_booking_handler() -> BookingHandler:
    return BookingHandler(BookingApplicationService(InMemoryBookingRepository()))


async def create_server(
    booking_handler: Optional[BookingServiceV1] = None,
    *,
    address: Optional[str] = None,
) -> tuple[grpc.aio.Server, int]:
    """Build a grpc.aio server with interceptors, health and booking.v1 bound.

    Returns the server and the bound port (useful with port 0 in tests).
    """
    interceptors: Sequence[grpc.aio.ServerInterceptor] = (
        RequestIdInterceptor(),
        LoggingInterceptor(),
        ExceptionMappingInterceptor(),  # maps business exceptions
    )

    options = [
        ("grpc.max_concurrent_streams", max(1, settings.grpc.max_concurrent_streams)),
    ]
    server = grpc.aio.server(interceptors=interceptors, options=options)

    # Register services
    add_booking_service_to_server(booking_handler or build_booking_handler(), server)

    # Health service
    health_svc = health.aio.HealthServicer()
    health_pb2_grpc.add_HealthServicer_to_server(health_svc, server)
    await health_svc.set("", health_pb2.HealthCheckResponse.SERVING)
    for contract in SERVED_CONTRACTS:
        await health_svc.set(contract.service_name(booking_v1.SERVICE), health_pb2.HealthCheckResponse.SERVING)

    # Bind address; TLS termination is left to the deployment
    address = address or f"{settings.grpc.host}:{settings.grpc.port}"
    port = server.add_insecure_port(address)
    logger.info("grpc_server_created", address=address, port=port, contracts=[c.package for c in SERVED_CONTRACTS])
    return server, port
