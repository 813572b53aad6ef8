"""
Orquestrador da Simulação (TuberculosisModel).

Responsabilidade:
- Integrar Configuração, Ambiente, Agendador, Fonte Estocástica e Agentes.
- Construir a população (traços, domicílio, trabalho, casos índice).
- Avançar o relógio simulado hora a hora (1 step = 1 tick).
- Coletar métricas diárias por compartimento.

Arquitetura:
- Herda de mesa.Model.
- Possui instâncias de Environment, EventScheduler e Randomizer, injetadas
  em cada Citizen na construção.
"""

import logging
from typing import Dict, List, Any

import numpy as np
import pandas as pd
from mesa import Model
from mesa.datacollection import DataCollector

from .agents import Citizen
from .config import Compartment, ParameterStore, ScenarioConfig
from .environment import Environment
from .randomizer import Randomizer
from .scheduler import EventScheduler
from .time_converter import TICKS_PER_DAY, days_to_ticks, ticks_to_days

# Logger setup
logger = logging.getLogger(__name__)


class TuberculosisModel(Model):
    """
    Modelo baseado em agentes da transmissão de tuberculose numa área urbana.
    O contato ocorre por co-localização em domicílios e locais de trabalho.
    """

    def __init__(self, scenario_config: ScenarioConfig):
        """
        Inicializa o modelo com base no cenário fornecido.

        Args:
            scenario_config: Objeto de configuração carregado (JSON validado).
        """
        super().__init__(seed=scenario_config.seed)
        self.config = scenario_config
        self.tick = 0
        self.total_ticks = days_to_ticks(scenario_config.duration_days)

        # 1. Parâmetros e Fonte Estocástica
        self.parameters = ParameterStore(scenario_config)
        self.randomizer = Randomizer(self.parameters, seed=scenario_config.seed)

        # 2. Ambiente (Grid + POIs)
        self.environment = Environment(scenario_config.grid)
        self.environment.generate_pois("household", scenario_config.population.household_count,
                                       self.randomizer.rng)
        self.environment.generate_pois("workplace", scenario_config.population.workplace_count,
                                       self.randomizer.rng)

        # 3. Agendador de Eventos
        self.scheduler = EventScheduler()

        # 4. População
        self.citizens: List[Citizen] = []
        self._initialize_agents()

        # 5. Coletores de Dados
        self.metrics_history: List[Dict[str, Any]] = []
        self.datacollector = DataCollector(
            model_reporters={
                "S": lambda m: m.count_indicator(Citizen.is_susceptible),
                "E": lambda m: m.count_indicator(Citizen.is_exposed),
                "I": lambda m: m.count_indicator(Citizen.is_infected),
                "T": lambda m: m.count_indicator(Citizen.is_on_treatment),
                "R": lambda m: m.count_indicator(Citizen.is_immune),
                "Active": lambda m: m.count_indicator(Citizen.is_active_case)
            }
        )
        self._collect()

        logger.info(f"Modelo inicializado: {self.config.name}. Agentes: {len(self.citizens)}")

    def _initialize_agents(self):
        """Cria a população, atribui POIs e executa a inicialização explícita."""
        pop = self.config.population
        rng = self.randomizer.rng
        compartments = (
            [Compartment.EXPOSED] * pop.exposed_count
            + [Compartment.SUSCEPTIBLE] * pop.susceptible_count
        )

        for compartment in compartments:
            citizen = Citizen(
                model=self,
                scheduler=self.scheduler,
                randomizer=self.randomizer,
                environment=self.environment,
                compartment=compartment
            )
            citizen.household = self.environment.get_random_poi("household", rng)
            citizen.workplace = self.environment.get_random_poi("workplace", rng)
            self.citizens.append(citizen)

        # Inicialização só depois de toda a população estar montada
        for citizen in self.citizens:
            citizen.initialize()

    def step(self):
        """Avança uma hora simulada despachando todos os eventos devidos."""
        self.tick += 1
        self.scheduler.run_until(self.tick)

        if self.tick % TICKS_PER_DAY == 0:
            self._collect()

        if self.tick >= self.total_ticks:
            self.running = False

    def run(self):
        """Executa até o fim da duração configurada."""
        while self.running:
            self.step()

    def _collect(self):
        self.datacollector.collect(self)
        counts = self.get_state_counts()
        metric = {
            "tick": self.tick,
            "day": ticks_to_days(self.tick),
            "S": counts[Compartment.SUSCEPTIBLE.value],
            "E": counts[Compartment.EXPOSED.value],
            "I": counts[Compartment.INFECTED.value],
            "T": counts[Compartment.ON_TREATMENT.value],
            "R": counts[Compartment.IMMUNE.value],
            "active_cases": self.count_indicator(Citizen.is_active_case),
        }
        self.metrics_history.append(metric)

    def count_indicator(self, indicator) -> int:
        """Soma um indicador 0/1 sobre a população."""
        return int(np.sum([indicator(c) for c in self.citizens]))

    def get_state_counts(self) -> Dict[str, int]:
        """Retorna contagem de agentes por compartimento."""
        counts = {c.value: 0 for c in Compartment}
        for citizen in self.citizens:
            counts[citizen.compartment.value] += 1
        return counts

    def get_metrics_dataframe(self) -> pd.DataFrame:
        """Exporta o histórico de métricas como DataFrame do Pandas."""
        return pd.DataFrame(self.metrics_history)
