"""
Pacote principal do Simulador GeoTB.

Este pacote contém os módulos da simulação baseada em agentes da
transmissão de tuberculose numa população urbana, dirigida por eventos discretos.

Módulos:
    - config: Compartimentos, constantes científicas e parâmetros do cenário.
    - model: Orquestrador da simulação (TuberculosisModel).
    - agents: Máquina de estados e contágio dos cidadãos.
    - scheduler: Agendador de eventos discretos.
    - randomizer: Fonte estocástica (traços, atrasos, Wells-Riley).
    - environment: Fachada espacial (grid, POIs).
    - time_converter: Conversão ticks <-> dias.
"""

# Expõe as classes principais para acesso direto
from .config import (
    Compartment,
    ScenarioConfig,
    PopulationConfig,
    ParameterStore,
    get_default_city_config,
    create_city_scenario
)

from .model import TuberculosisModel
from .agents import Citizen
from .scheduler import EventScheduler, EventType, EventHandle
from .randomizer import Randomizer
from .environment import Environment

__all__ = [
    "TuberculosisModel",
    "Citizen",
    "EventScheduler",
    "EventType",
    "EventHandle",
    "Randomizer",
    "Environment",
    "Compartment",
    "ScenarioConfig",
    "PopulationConfig",
    "ParameterStore",
    "get_default_city_config",
    "create_city_scenario"
]

__version__ = "1.0.0"
