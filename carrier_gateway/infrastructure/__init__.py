"""Infrastructure Layer — vendor HTTP, credentials, config files and logging.

Invariants:
    - Only this layer and the lifespan touch httpx, os.environ or the filesystem
    - Every transport failure is mapped to a CarrierGatewayError naming the carrier

Design Decisions:
    - Clients are instances injected from the lifespan, never module singletons
"""
