"""
Fixtures compartilhadas da suíte.

O StubRandomizer substitui a fonte estocástica por valores fixos e
registra as chamadas, tornando a máquina de estados determinística.
"""

import pytest
from mesa import Model

from geotb.agents import Citizen
from geotb.config import Compartment, GridConfig
from geotb.environment import Environment
from geotb.scheduler import EventScheduler


class StubRandomizer:
    """Fonte estocástica determinística com contadores de chamadas."""

    def __init__(self):
        self.wake_up_time = 6.0
        self.returning_home_time = 17.0
        self.immunodeficiency = False
        self.smoker = False
        self.alcohol_drinker = False

        self.infect = True
        self.expose = False
        self.dropouts = []
        self.incubation_period = 10.0
        self.days_to_diagnosis = 5.0
        self.treatment_duration = 180.0
        self.days_to_full_recovery = 730.0

        self.infection_calls = 0
        self.exposure_calls = []

    def get_random_wake_up_time(self):
        return self.wake_up_time

    def get_random_returning_home_time(self):
        return self.returning_home_time

    def get_random_immunodeficiency(self):
        return self.immunodeficiency

    def get_random_smoker(self):
        return self.smoker

    def get_random_alcohol_drinker(self):
        return self.alcohol_drinker

    def is_getting_infected(self, citizen):
        self.infection_calls += 1
        return self.infect

    def get_random_incubation_period(self):
        return self.incubation_period

    def get_random_days_to_diagnosis(self):
        return self.days_to_diagnosis

    def is_dropping_out_treatment(self):
        return self.dropouts.pop(0) if self.dropouts else False

    def get_random_treatment_duration(self):
        return self.treatment_duration

    def get_random_days_to_full_recovery(self):
        return self.days_to_full_recovery

    def is_getting_exposed(self, infected_count):
        self.exposure_calls.append(infected_count)
        return self.expose


@pytest.fixture
def mesa_model():
    return Model(seed=1)


@pytest.fixture
def scheduler():
    return EventScheduler()


@pytest.fixture
def stub():
    return StubRandomizer()


@pytest.fixture
def environment():
    return Environment(GridConfig(width=10, height=10))


@pytest.fixture
def make_citizen(mesa_model, scheduler, stub, environment):
    """Fábrica de cidadãos com domicílio e trabalho já atribuídos."""

    def _make(compartment=Compartment.SUSCEPTIBLE, household=(1.5, 1.5),
              workplace=(5.5, 5.5), place=True):
        citizen = Citizen(
            model=mesa_model,
            scheduler=scheduler,
            randomizer=stub,
            environment=environment,
            compartment=compartment
        )
        citizen.household = household
        citizen.workplace = workplace
        if place:
            environment.move_to(citizen, *household)
        return citizen

    return _make
