"""gRPC transport layer for the booking service.

This package hosts:
- Versioned wire contracts (in `schema/`, readable copies in `protos/`).
- Request validation, domain <-> wire mappers and the booking handlers.
- Server bootstrap, interceptors and the transport adapter binding RPC
  paths to handler methods.
"""
