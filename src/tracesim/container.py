from dependency_injector import containers, providers

from tracesim.config import Settings
from tracesim.infra.http.rpc_http_client import RpcHttpClient
from tracesim.infra.rpc.trace_client import TraceClient
from tracesim.parser.utils.context import InterpretOptions
from tracesim.simulation.service import SimulationService


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["tracesim.api.deps"])

    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RpcHttpClient,
        rpc_url=settings.provided.rpc_url,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.rpc_timeout,
    )

    trace_client = providers.Singleton(
        TraceClient,
        http_client=http_client,
    )

    interpret_options = providers.Singleton(InterpretOptions.from_settings, settings)

    simulation_service = providers.Factory(
        SimulationService,
        client=trace_client,
        options=interpret_options,
    )
