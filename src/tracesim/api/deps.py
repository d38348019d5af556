from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from tracesim.container import Container
from tracesim.parser.utils.context import InterpretOptions
from tracesim.simulation.service import SimulationService


@inject
def get_simulation_service(
    service: SimulationService = Depends(Provide[Container.simulation_service]),
) -> SimulationService:
    return service


@inject
def get_interpret_options(
    options: InterpretOptions = Depends(Provide[Container.interpret_options]),
) -> InterpretOptions:
    return options
