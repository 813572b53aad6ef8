"""
Módulo de Agentes Epidemiológicos (Citizen).

Implementa a máquina de estados da tuberculose por indivíduo, a rotina
diária casa-trabalho e o algoritmo de contágio por co-localização.

Todas as transições são chamadas síncronas disparadas pelo EventScheduler
(ou pelo passo de contágio de outro agente).

Dependências:
- mesa: Framework de ABM.
- geotb.scheduler / randomizer / environment: colaboradores injetados.
"""

import logging
from typing import Any, Optional, Tuple

from mesa import Agent

from .config import ACTIVE_CASE_COMPARTMENTS, Compartment
from .environment import Environment
from .randomizer import PARTICLE_EXPELLING_INTERVAL, Randomizer
from .scheduler import EventHandle, EventScheduler, EventType
from .time_converter import TICKS_PER_DAY, days_to_ticks

# Configuração de Logger
logger = logging.getLogger(__name__)


class Citizen(Agent):
    """
    Cidadão com rotina diária e história natural da tuberculose.

    Atributos:
        unique_id (int): Identificador único (atribuído pelo Mesa).
        household (Tuple[float, float]): Coordenadas do domicílio.
        workplace (Tuple[float, float]): Coordenadas do local de trabalho.
        wake_up_time (float): Hora do dia em que sai para o trabalho.
        returning_home_time (float): Hora do dia em que volta para casa.
        compartment (Compartment): Estado epidemiológico.
        expel_handle (EventHandle): Evento recorrente de expulsão de
            partículas; presente apenas enquanto INFECTED.
    """

    def __init__(
        self,
        model: Any,
        scheduler: EventScheduler,
        randomizer: Randomizer,
        environment: Environment,
        compartment: Compartment = Compartment.SUSCEPTIBLE
    ):
        """
        Inicializa o cidadão com traços comportamentais sorteados.

        Args:
            model: Referência ao modelo Mesa.
            scheduler: Agendador de eventos compartilhado.
            randomizer: Fonte estocástica compartilhada.
            environment: Fachada espacial compartilhada.
            compartment: Estado inicial (SUSCEPTIBLE ou EXPOSED para casos índice).
        """
        super().__init__(model)
        self.scheduler = scheduler
        self.randomizer = randomizer
        self.environment = environment
        self.compartment = compartment

        self.household: Optional[Tuple[float, float]] = None
        self.workplace: Optional[Tuple[float, float]] = None

        # --- Traços sorteados ---
        self.wake_up_time = randomizer.get_random_wake_up_time()
        self.returning_home_time = randomizer.get_random_returning_home_time()
        self._immunosuppressed = randomizer.get_random_immunodeficiency()
        self._smokes = randomizer.get_random_smoker()
        self._drinks_alcohol = randomizer.get_random_alcohol_drinker()

        self.expel_handle: Optional[EventHandle] = None
        self._initialized = False

        self._dispatch = {
            EventType.WAKE_UP: self.wake_up,
            EventType.RETURN_HOME: self.return_home,
            EventType.EXPEL_PARTICLES: self.expel_particles,
            EventType.TO_INFECTED: self.transition_to_infected,
            EventType.TO_ON_TREATMENT: self.transition_to_on_treatment,
            EventType.TO_IMMUNE: self.transition_to_immune,
            EventType.TO_SUSCEPTIBLE: self.transition_to_susceptible,
        }

    def initialize(self):
        """
        Inicialização explícita, chamada pelo construtor da população
        depois que domicílio e local de trabalho foram atribuídos.

        Ordem: caso índice -> eventos diários -> ida para casa.
        """
        if self._initialized:
            raise RuntimeError(f"Cidadão {self.unique_id} já inicializado")
        self.environment.validate_point(self.household)
        self.environment.validate_point(self.workplace)
        self._initialized = True

        if self.compartment == Compartment.EXPOSED:
            self.transition_to_exposed(True)
        self._schedule_recurring_events()
        self._go_to(self.household)

    def handle_event(self, event_type: EventType):
        """Ponto de entrada do EventScheduler."""
        self._dispatch[event_type]()

    # ========================================================================
    # ROTINA DIÁRIA
    # ========================================================================

    def wake_up(self):
        """Acorda e vai para o trabalho."""
        self._go_to(self.workplace)

    def return_home(self):
        """Retorna ao domicílio."""
        self._go_to(self.household)

    def expel_particles(self):
        """Expele partículas no ambiente atual (uma vez por hora enquanto INFECTED)."""
        self._infect()

    # ========================================================================
    # MÁQUINA DE ESTADOS
    # ========================================================================

    def transition_to_susceptible(self):
        self.compartment = Compartment.SUSCEPTIBLE
        logger.debug(f"Cidadão {self.unique_id} suscetível novamente.")

    def transition_to_exposed(self, is_initial_setup: bool):
        """
        Transiciona para EXPOSED.

        Se o portão de progressão passar (ou for a configuração inicial),
        agenda a infecção após o período de incubação. Caso contrário,
        retorna imediatamente para SUSCEPTIBLE.
        """
        self.compartment = Compartment.EXPOSED
        if self.randomizer.is_getting_infected(self) or is_initial_setup:
            incubation_period = self.randomizer.get_random_incubation_period()
            ticks = days_to_ticks(incubation_period)
            self.scheduler.schedule_once(ticks, self, EventType.TO_INFECTED)
            logger.debug(f"Cidadão {self.unique_id} exposto. Infecção em {incubation_period:.1f} dias.")
        else:
            self.transition_to_susceptible()

    def transition_to_infected(self):
        """Transiciona para INFECTED: expulsão de partículas + espera pelo diagnóstico."""
        self.compartment = Compartment.INFECTED
        self.expel_handle = self.scheduler.schedule_recurring(
            PARTICLE_EXPELLING_INTERVAL, self,
            PARTICLE_EXPELLING_INTERVAL, EventType.EXPEL_PARTICLES
        )
        days_to_diagnosis = self.randomizer.get_random_days_to_diagnosis()
        ticks = days_to_ticks(days_to_diagnosis)
        self.scheduler.schedule_once(ticks, self, EventType.TO_ON_TREATMENT)
        logger.debug(f"Cidadão {self.unique_id} infectado. Diagnóstico em {days_to_diagnosis:.1f} dias.")

    def transition_to_on_treatment(self):
        """
        Transiciona para ON_TREATMENT.

        A expulsão de partículas corrente é cancelada nos dois ramos.
        Em caso de abandono o cidadão recai para INFECTED com um novo
        handle de expulsão e um novo atraso de diagnóstico.
        """
        self.compartment = Compartment.ON_TREATMENT
        # Cancela o handle anterior antes de uma eventual recaída criar outro
        self.scheduler.cancel(self.expel_handle)
        self.expel_handle = None

        if self.randomizer.is_dropping_out_treatment():
            logger.debug(f"Cidadão {self.unique_id} abandonou o tratamento.")
            self.transition_to_infected()
        else:
            treatment_duration = self.randomizer.get_random_treatment_duration()
            ticks = days_to_ticks(treatment_duration)
            self.scheduler.schedule_once(ticks, self, EventType.TO_IMMUNE)

    def transition_to_immune(self):
        self.compartment = Compartment.IMMUNE
        days_to_full_recovery = self.randomizer.get_random_days_to_full_recovery()
        ticks = days_to_ticks(days_to_full_recovery)
        self.scheduler.schedule_once(ticks, self, EventType.TO_SUSCEPTIBLE)

    # ========================================================================
    # INDICADORES (Reporters)
    # ========================================================================

    def is_susceptible(self) -> int:
        return int(self.compartment == Compartment.SUSCEPTIBLE)

    def is_exposed(self) -> int:
        return int(self.compartment == Compartment.EXPOSED)

    def is_infected(self) -> int:
        return int(self.compartment == Compartment.INFECTED)

    def is_on_treatment(self) -> int:
        return int(self.compartment == Compartment.ON_TREATMENT)

    def is_immune(self) -> int:
        return int(self.compartment == Compartment.IMMUNE)

    def is_active_case(self) -> int:
        return int(self.compartment in ACTIVE_CASE_COMPARTMENTS)

    def is_immunodepressed(self) -> bool:
        return self._immunosuppressed

    def smokes(self) -> bool:
        return self._smokes

    def drinks_alcohol(self) -> bool:
        return self._drinks_alcohol

    # ========================================================================
    # LÓGICA INTERNA (PRIVADA)
    # ========================================================================

    def _infect(self):
        """
        Contágio por co-localização.

        A contagem de infectados da célula é fixada antes do laço; exposições
        ocorridas no próprio laço não alteram os sorteios seguintes.
        """
        cell = self.environment.location_of(self)
        for _, occupants in self.environment.neighborhood(cell, radius=0, include_self=True):
            infected_count = self._count_infected(occupants)
            for citizen in occupants:
                if (citizen.compartment == Compartment.SUSCEPTIBLE
                        and self.randomizer.is_getting_exposed(infected_count)):
                    citizen.transition_to_exposed(False)

    @staticmethod
    def _count_infected(citizens) -> int:
        return sum(1 for c in citizens if c.compartment == Compartment.INFECTED)

    def _schedule_recurring_events(self):
        """Arma os eventos diários de ida ao trabalho e volta para casa."""
        self.scheduler.schedule_recurring(
            self.wake_up_time, self, TICKS_PER_DAY, EventType.WAKE_UP
        )
        self.scheduler.schedule_recurring(
            self.returning_home_time, self, TICKS_PER_DAY, EventType.RETURN_HOME
        )

    def _go_to(self, location: Tuple[float, float]):
        x, y = location
        self.environment.move_to(self, x, y)
