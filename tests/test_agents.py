"""
Testes da Máquina de Estados do Cidadão.

Objetivo:
    Validar as transições SUSCEPTIBLE -> EXPOSED -> INFECTED -> ON_TREATMENT
    -> IMMUNE -> SUSCEPTIBLE, o ciclo de recaída por abandono do tratamento,
    a expulsão horária de partículas e a rotina casa-trabalho.

Contexto:
    A fonte estocástica é substituída pelo StubRandomizer (conftest), de modo
    que os atrasos e portões são determinísticos.
"""

import pytest

from geotb.config import Compartment
from geotb.scheduler import EventType
from geotb.time_converter import days_to_ticks

INDICATORS = ("is_susceptible", "is_exposed", "is_infected", "is_on_treatment", "is_immune")


def pending_types(scheduler, citizen):
    return [e.event_type for e in scheduler.pending_events(citizen)]


def assert_single_indicator(citizen):
    assert sum(getattr(citizen, name)() for name in INDICATORS) == 1

# ============================================================================
# INICIALIZAÇÃO
# ============================================================================

def test_initialize_places_citizen_at_household(make_citizen, scheduler, environment):
    citizen = make_citizen(household=(2.7, 3.2), place=False)
    citizen.initialize()

    assert environment.location_of(citizen) == (2, 3)
    assert environment.position_of(citizen) == (2.7, 3.2)
    assert sorted(pending_types(scheduler, citizen)) == sorted([EventType.WAKE_UP, EventType.RETURN_HOME])


def test_initialize_fails_fast_without_locations(make_citizen):
    citizen = make_citizen(place=False)
    citizen.workplace = None
    with pytest.raises(ValueError):
        citizen.initialize()


def test_initialize_rejects_points_outside_grid(make_citizen):
    citizen = make_citizen(place=False)
    citizen.household = (12.0, 1.0)
    with pytest.raises(ValueError):
        citizen.initialize()


def test_initialize_runs_only_once(make_citizen):
    citizen = make_citizen()
    citizen.initialize()
    with pytest.raises(RuntimeError):
        citizen.initialize()

# ============================================================================
# EXPOSIÇÃO
# ============================================================================

def test_initial_exposure_always_schedules_incubation(make_citizen, scheduler, stub):
    stub.infect = False
    citizen = make_citizen()

    citizen.transition_to_exposed(True)

    assert citizen.compartment == Compartment.EXPOSED
    assert stub.infection_calls == 1
    events = scheduler.pending_events(citizen)
    assert [e.event_type for e in events] == [EventType.TO_INFECTED]
    assert events[0].tick == days_to_ticks(stub.incubation_period)


def test_failed_progression_gate_reverts_within_call(make_citizen, scheduler, stub):
    stub.infect = False
    citizen = make_citizen()

    citizen.transition_to_exposed(False)

    assert citizen.compartment == Compartment.SUSCEPTIBLE
    assert stub.infection_calls == 1
    assert scheduler.pending_events(citizen) == []


def test_passed_progression_gate_schedules_infection(make_citizen, scheduler, stub):
    citizen = make_citizen()
    citizen.transition_to_exposed(False)

    assert citizen.compartment == Compartment.EXPOSED
    assert pending_types(scheduler, citizen) == [EventType.TO_INFECTED]


def test_seed_case_stays_exposed_until_incubation_ends(make_citizen, scheduler, stub):
    stub.incubation_period = 3.0
    citizen = make_citizen(compartment=Compartment.EXPOSED)
    citizen.initialize()
    incubation_ticks = days_to_ticks(3.0)

    scheduler.run_until(incubation_ticks - 0.5)
    assert citizen.compartment == Compartment.EXPOSED

    scheduler.run_until(incubation_ticks)
    assert citizen.compartment == Compartment.INFECTED
    assert citizen.expel_handle is not None and citizen.expel_handle.active

# ============================================================================
# INFECÇÃO E TRATAMENTO
# ============================================================================

def test_infected_expels_once_per_hour_until_treatment(make_citizen, scheduler, stub):
    stub.days_to_diagnosis = 49.5 / 24
    infected = make_citizen()
    make_citizen()  # suscetível co-localizado recebe um sorteio por expulsão

    infected.transition_to_infected()
    handle = infected.expel_handle
    scheduler.run_until(200)

    assert stub.exposure_calls == [1] * 49
    assert infected.compartment == Compartment.ON_TREATMENT
    assert not handle.active
    assert infected.expel_handle is None


def test_treatment_without_dropout_schedules_immunity(make_citizen, scheduler, stub):
    citizen = make_citizen()
    citizen.transition_to_infected()
    scheduler.run_until(days_to_ticks(stub.days_to_diagnosis))

    assert citizen.compartment == Compartment.ON_TREATMENT
    events = scheduler.pending_events(citizen)
    assert [e.event_type for e in events] == [EventType.TO_IMMUNE]
    assert events[0].tick == days_to_ticks(stub.days_to_diagnosis + stub.treatment_duration)


def test_dropout_relapses_with_fresh_handle_and_diagnosis(make_citizen, scheduler, stub):
    stub.dropouts = [True]
    citizen = make_citizen()
    citizen.transition_to_infected()
    old_handle = citizen.expel_handle

    scheduler.run_until(days_to_ticks(stub.days_to_diagnosis))

    assert citizen.compartment == Compartment.INFECTED
    assert not old_handle.active
    assert citizen.expel_handle is not old_handle
    assert citizen.expel_handle.active
    types = pending_types(scheduler, citizen)
    assert types.count(EventType.TO_ON_TREATMENT) == 1
    assert types.count(EventType.EXPEL_PARTICLES) == 1
    assert EventType.TO_IMMUNE not in types


def test_consecutive_dropouts_never_reach_immunity(make_citizen, scheduler, stub):
    n_dropouts = 4
    stub.dropouts = [True] * n_dropouts
    stub.days_to_diagnosis = 1.0
    citizen = make_citizen()

    citizen.transition_to_infected()
    handles = [citizen.expel_handle]
    diagnosis_ticks = []

    for cycle in range(1, n_dropouts + 1):
        scheduler.run_until(days_to_ticks(cycle))
        assert citizen.compartment == Compartment.INFECTED
        assert citizen.is_immune() == 0
        handles.append(citizen.expel_handle)
        diagnosis_ticks.extend(
            e.tick for e in scheduler.pending_events(citizen)
            if e.event_type == EventType.TO_ON_TREATMENT
        )

    # Um novo diagnóstico e um novo handle por abandono
    assert diagnosis_ticks == [days_to_ticks(c + 1) for c in range(1, n_dropouts + 1)]
    assert len({id(h) for h in handles}) == n_dropouts + 1
    assert [h.active for h in handles] == [False] * n_dropouts + [True]

    scheduler.run_until(days_to_ticks(n_dropouts + 1))
    assert citizen.compartment == Compartment.ON_TREATMENT


def test_full_cycle_is_repeatable_without_residual_state(make_citizen, scheduler, stub):
    stub.incubation_period = 1.0
    stub.days_to_diagnosis = 2.0
    stub.treatment_duration = 3.0
    stub.days_to_full_recovery = 4.0
    citizen = make_citizen()
    citizen.initialize()
    cycle_days = 1.0 + 2.0 + 3.0 + 4.0

    for _ in range(3):
        start = scheduler.now
        citizen.transition_to_exposed(False)
        seen = set()
        for day in range(1, int(cycle_days) + 1):
            scheduler.run_until(start + days_to_ticks(day))
            seen.add(citizen.compartment)
            assert_single_indicator(citizen)

        assert citizen.compartment == Compartment.SUSCEPTIBLE
        assert seen == {
            Compartment.INFECTED,
            Compartment.ON_TREATMENT,
            Compartment.IMMUNE,
            Compartment.SUSCEPTIBLE,
        }
        assert citizen.expel_handle is None
        assert sorted(pending_types(scheduler, citizen)) == sorted(
            [EventType.WAKE_UP, EventType.RETURN_HOME]
        )


def test_active_case_indicator(make_citizen):
    citizen = make_citizen()
    expected = {
        Compartment.SUSCEPTIBLE: 0,
        Compartment.EXPOSED: 1,
        Compartment.INFECTED: 1,
        Compartment.ON_TREATMENT: 1,
        Compartment.IMMUNE: 0,
    }
    for compartment, active in expected.items():
        citizen.compartment = compartment
        assert citizen.is_active_case() == active
        assert_single_indicator(citizen)

# ============================================================================
# ROTINA DIÁRIA
# ============================================================================

def test_daily_commute_moves_between_household_and_workplace(make_citizen, scheduler, environment, stub):
    citizen = make_citizen(household=(1.5, 1.5), workplace=(7.25, 4.75), place=False)
    citizen.initialize()

    scheduler.run_until(stub.wake_up_time)
    assert environment.location_of(citizen) == (7, 4)
    assert environment.position_of(citizen) == (7.25, 4.75)

    scheduler.run_until(stub.returning_home_time)
    assert environment.location_of(citizen) == (1, 1)

    scheduler.run_until(24 + stub.wake_up_time)
    assert environment.location_of(citizen) == (7, 4)
    assert citizen.compartment == Compartment.SUSCEPTIBLE
