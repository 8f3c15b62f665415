from pytest_archon import archrule


def test_decoding_core_is_transport_free() -> None:
    """
    The decoding pipeline is a pure function of its input.
    It must not reach for the broker client, the HTTP client or the adapters.
    """
    (
        archrule("decoding_core_is_transport_free")
        .match("snoop_messaging.*")
        .exclude("snoop_messaging.rabbitmq*")
        .should_not_import("snoop_messaging.rabbitmq*")
        .should_not_import("aio_pika*")
        .should_not_import("httpx*")
        .check("snoop_messaging")
    )


def test_service_goes_through_management_client() -> None:
    """
    The queue service forwards to the management client only.
    It must not talk HTTP or AMQP itself.
    """
    (
        archrule("service_uses_client")
        .match("snoop_messaging.rabbitmq.service")
        .should_not_import("httpx*")
        .should_not_import("aio_pika*")
        .check("snoop_messaging", only_direct_imports=True)
    )
