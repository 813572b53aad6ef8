"""
Fonte Estocástica (Randomizer).

Centraliza todos os sorteios do modelo: traços comportamentais,
atrasos da história natural da doença e os portões de infecção/exposição.

Todas as funções são totais: dado o ParameterStore, sempre retornam valor.

Dependências:
- numpy: Gerador pseudo-aleatório (np.random.Generator).
- scipy.stats: Distribuições de atrasos (Gamma, Exponencial).
"""

import logging
import math
from typing import Optional

import numpy as np
from scipy import stats

from .config import ModelParameters, ParameterStore

logger = logging.getLogger(__name__)

# Intervalo de expulsão de partículas (horas) = tempo de exposição por disparo
PARTICLE_EXPELLING_INTERVAL = 1


class Randomizer:
    """
    Sorteios parametrizados pelo repositório de parâmetros.

    Atributos:
        params (ParameterStore): Parâmetros do cenário.
        rng (np.random.Generator): Gerador usado em todos os sorteios.
    """

    def __init__(self, params: ParameterStore, seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        self.params = params
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    # ========================================================================
    # TRAÇOS COMPORTAMENTAIS
    # ========================================================================

    def get_random_wake_up_time(self) -> float:
        """Hora de acordar em [5h, 8h)."""
        return self.rng.uniform(ModelParameters.INITIAL_WAKEUP_TIME,
                                ModelParameters.FINAL_WAKEUP_TIME)

    def get_random_returning_home_time(self) -> float:
        """Hora de retorno: janela de acordar somada à jornada de trabalho."""
        return self.rng.uniform(
            ModelParameters.INITIAL_WAKEUP_TIME + ModelParameters.MIN_WORK_TIME,
            ModelParameters.FINAL_WAKEUP_TIME + ModelParameters.MAX_WORK_TIME
        )

    def get_random_immunodeficiency(self) -> bool:
        return self._bernoulli(self.params.get("immunodepression_share"))

    def get_random_smoker(self) -> bool:
        return self._bernoulli(self.params.get("smokers_share"))

    def get_random_alcohol_drinker(self) -> bool:
        return self._bernoulli(self.params.get("alcohol_drinkers_share"))

    # ========================================================================
    # HISTÓRIA NATURAL DA DOENÇA
    # ========================================================================

    def infection_risk(self, citizen) -> float:
        """
        Probabilidade de progressão da exposição para infecção.

        Composição multiplicativa dos fatores de risco:
            p = p_base * 10 (imunossupressão) * 1.5 (tabagismo) * 1.5 (álcool)
        Limitada a 1.
        """
        risk = self.params.infection_probability
        if citizen.is_immunodepressed():
            risk *= ModelParameters.IMMUNODEFICIENCY_FOLD
        if citizen.smokes():
            risk *= ModelParameters.RISK_FACTOR_ADJUSTMENT
        if citizen.drinks_alcohol():
            risk *= ModelParameters.RISK_FACTOR_ADJUSTMENT
        return min(risk, 1.0)

    def is_getting_infected(self, citizen) -> bool:
        return self._bernoulli(self.infection_risk(citizen))

    def get_random_incubation_period(self) -> float:
        """Período de incubação (dias) ~ Gamma(forma, média)."""
        shape = self.params.get("incubation_shape")
        mean = self.params.get("mean_incubation_period")
        return float(stats.gamma(a=shape, scale=mean / shape).rvs(random_state=self.rng))

    def get_random_days_to_diagnosis(self) -> float:
        """Atraso de diagnóstico (dias) ~ Exponencial(média)."""
        mean = self.params.get("mean_diagnosis_delay")
        return float(stats.expon(scale=mean).rvs(random_state=self.rng))

    def is_dropping_out_treatment(self) -> bool:
        return self._bernoulli(self.params.treatment_dropout_rate)

    def get_random_treatment_duration(self) -> float:
        """Duração do tratamento (dias). Esquema padrão de 6 meses."""
        return self.params.get("treatment_duration")

    def get_random_days_to_full_recovery(self) -> float:
        return self.params.get("days_to_full_recovery")

    # ========================================================================
    # EXPOSIÇÃO (Wells-Riley)
    # ========================================================================

    def exposure_probability(self, infected_count: int) -> float:
        """
        Probabilidade de exposição de um suscetível no mesmo ambiente.

        Modelo Exponencial de Dose-Resposta (Wells-Riley):
            P = 1 - exp(-I * q * p * t / Q)
        Onde Q = ACH * Volume (m³/h) e t = intervalo de expulsão (h).
        """
        if infected_count <= 0:
            return 0.0
        airflow = self.params.average_room_ventilation_rate * self.params.average_room_volume
        dose = (
            infected_count
            * ModelParameters.AVG_PATIENT_QUANTA_PRODUCTION
            * ModelParameters.AVG_PULMONARY_VENTILATION_RATE
            * PARTICLE_EXPELLING_INTERVAL
        ) / airflow
        return 1.0 - math.exp(-dose)

    def is_getting_exposed(self, infected_count: int) -> bool:
        return self._bernoulli(self.exposure_probability(infected_count))

    def _bernoulli(self, p: float) -> bool:
        """Sorteio de Bernoulli."""
        return bool(self.rng.random() < p)
