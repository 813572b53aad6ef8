"""
Módulo de Configuração e Definição de Tipos do Simulador GeoTB.

ARQUITETURA:
Este módulo atua como o 'Schema Definition' do projeto.
Define os compartimentos epidemiológicos, as constantes da literatura e as
estruturas de dados (Dataclasses) que descrevem um cenário urbano.

Responsabilidade:
- Definir Dataclasses para tipagem forte.
- Centralizar constantes científicas (Beggs 2003, Noakes 2006).
- Serialização e Deserialização (JSON <-> Python Object).
- Expor o repositório de parâmetros (ParameterStore) consumido pelos agentes.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, Union
from pathlib import Path

logger = logging.getLogger(__name__)

# ============================================================================
# 1. ENUMS (Domínio Discreto)
# ============================================================================

class Compartment(str, Enum):
    """Compartimentos epidemiológicos (SEIR + tratamento)."""
    SUSCEPTIBLE = "SUSCEPTIBLE"
    EXPOSED = "EXPOSED"
    INFECTED = "INFECTED"
    ON_TREATMENT = "ON_TREATMENT"
    IMMUNE = "IMMUNE"

# Compartimentos contabilizados como caso ativo
ACTIVE_CASE_COMPARTMENTS = frozenset({
    Compartment.EXPOSED,
    Compartment.INFECTED,
    Compartment.ON_TREATMENT,
})

# ============================================================================
# 2. CONSTANTES CIENTÍFICAS (Literature-based)
# ============================================================================

@dataclass(frozen=True)
class ModelParameters:
    """
    Constantes do modelo de tuberculose.

    Rotina diária por intuição; fatores de risco da literatura;
    produção de quanta de Beggs et al. (2003) e ventilação pulmonar
    de Noakes et al. (2006).
    """
    # Rotina (horas)
    INITIAL_WAKEUP_TIME: int = 5
    FINAL_WAKEUP_TIME: int = 8
    MIN_WORK_TIME: int = 9
    MAX_WORK_TIME: int = 11

    # Fatores de risco
    IMMUNODEFICIENCY_FOLD: float = 10.0
    RISK_FACTOR_ADJUSTMENT: float = 1.5
    TREATMENT_DURATION: float = 4320.0      # horas (180 dias)
    TIME_TO_FULL_RECOVERY: float = 17520.0  # horas (730 dias)

    # Dose-resposta (Wells-Riley)
    AVG_PATIENT_QUANTA_PRODUCTION: float = 1.25  # quanta/h
    AVG_PULMONARY_VENTILATION_RATE: float = 0.48  # m³/h

    # Conversões simples
    HOURS_IN_DAY: int = 24

# ============================================================================
# 3. DATA STRUCTURES (O Schema do Cenário)
# ============================================================================

def _check_share(name: str, value: float):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} deve estar em [0, 1], recebido {value}")

def _check_positive(name: str, value: float):
    if value <= 0:
        raise ValueError(f"{name} deve ser positivo, recebido {value}")

# Validação aplicada a cada ajuste externo
_TUNABLE_CHECKS = {
    "infection_probability": _check_share,
    "average_room_ventilation_rate": _check_positive,
}

@dataclass
class GridConfig:
    """Dimensões do grid urbano (células de 1x1)."""
    width: int = 50
    height: int = 50

    def __post_init__(self):
        _check_positive("width", self.width)
        _check_positive("height", self.height)

@dataclass
class PopulationConfig:
    """Configuração da população e da distribuição de fatores de risco."""
    susceptible_count: int
    exposed_count: int
    household_count: int = 200
    workplace_count: int = 40
    immunodepression_share: float = 0.05
    smokers_share: float = 0.2
    alcohol_drinkers_share: float = 0.1

    def __post_init__(self):
        if self.susceptible_count < 0 or self.exposed_count < 0:
            raise ValueError("Contagens de população não podem ser negativas")
        _check_positive("household_count", self.household_count)
        _check_positive("workplace_count", self.workplace_count)
        _check_share("immunodepression_share", self.immunodepression_share)
        _check_share("smokers_share", self.smokers_share)
        _check_share("alcohol_drinkers_share", self.alcohol_drinkers_share)

    @property
    def total(self) -> int:
        return self.susceptible_count + self.exposed_count

@dataclass
class EpidemiologyConfig:
    """Taxas e atrasos da história natural da doença (em dias)."""
    infection_probability: float = 0.1
    mean_incubation_period: float = 90.0
    incubation_shape: float = 2.0
    mean_diagnosis_delay: float = 60.0
    treatment_dropout_rate: float = 0.1
    treatment_duration: float = ModelParameters.TREATMENT_DURATION / ModelParameters.HOURS_IN_DAY
    days_to_full_recovery: float = ModelParameters.TIME_TO_FULL_RECOVERY / ModelParameters.HOURS_IN_DAY

    def __post_init__(self):
        _check_share("infection_probability", self.infection_probability)
        _check_share("treatment_dropout_rate", self.treatment_dropout_rate)
        _check_positive("mean_incubation_period", self.mean_incubation_period)
        _check_positive("incubation_shape", self.incubation_shape)
        _check_positive("mean_diagnosis_delay", self.mean_diagnosis_delay)
        _check_positive("treatment_duration", self.treatment_duration)
        _check_positive("days_to_full_recovery", self.days_to_full_recovery)

@dataclass
class RoomConfig:
    """Ambiente interno médio onde ocorre o contato (Wells-Riley)."""
    average_room_volume: float = 50.0            # m³
    average_room_ventilation_rate: float = 2.0   # trocas por hora (ACH)

    def __post_init__(self):
        _check_positive("average_room_volume", self.average_room_volume)
        _check_positive("average_room_ventilation_rate", self.average_room_ventilation_rate)

@dataclass
class CalibrationConfig:
    """
    Metas e hiperparâmetros da calibração externa (Q-learning).
    Armazenados apenas; o núcleo da simulação não os consome.
    """
    incidence_rate_goal: float = 0.0
    exposure_rate_goal: float = 0.0
    epsilon: float = 0.1
    learning_rate: float = 0.1
    discount_factor: float = 0.9

@dataclass
class ScenarioConfig:
    """
    Objeto Raiz de Configuração.
    Representa o conteúdo completo de um arquivo .json de cenário.
    """
    name: str
    description: str
    duration_days: float
    population: PopulationConfig
    grid: GridConfig = field(default_factory=GridConfig)
    epidemiology: EpidemiologyConfig = field(default_factory=EpidemiologyConfig)
    room: RoomConfig = field(default_factory=RoomConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    seed: Union[int, None] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScenarioConfig':
        """
        Factory method que hidrata um dicionário (do JSON) em objetos tipados.
        Seções opcionais recebem os valores padrão.
        """
        try:
            pop_data = data['population']
            population = PopulationConfig(
                susceptible_count=pop_data['susceptible'],
                exposed_count=pop_data['exposed'],
                household_count=pop_data.get('households', 200),
                workplace_count=pop_data.get('workplaces', 40),
                immunodepression_share=pop_data.get('immunodepression_share', 0.05),
                smokers_share=pop_data.get('smokers_share', 0.2),
                alcohol_drinkers_share=pop_data.get('alcohol_drinkers_share', 0.1)
            )

            grid = GridConfig(**data.get('grid', {}))
            epidemiology = EpidemiologyConfig(**data.get('epidemiology', {}))
            room = RoomConfig(**data.get('room', {}))
            calibration = CalibrationConfig(**data.get('calibration', {}))

            return cls(
                name=data['name'],
                description=data.get('description', ''),
                duration_days=data['duration_days'],
                population=population,
                grid=grid,
                epidemiology=epidemiology,
                room=room,
                calibration=calibration,
                seed=data.get('seed')
            )
        except KeyError as e:
            raise ValueError(f"JSON de cenário inválido. Campo faltando: {e}")
        except TypeError as e:
            raise ValueError(f"Campo desconhecido no JSON: {e}")

    @classmethod
    def load_from_json(cls, filepath: Union[str, Path]) -> 'ScenarioConfig':
        """Carrega e valida um arquivo JSON do disco."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Arquivo de cenário não encontrado: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Formato inverso de from_dict (mesmas chaves do JSON)."""
        data = asdict(self)
        pop = data.pop('population')
        data['population'] = {
            'susceptible': pop['susceptible_count'],
            'exposed': pop['exposed_count'],
            'households': pop['household_count'],
            'workplaces': pop['workplace_count'],
            'immunodepression_share': pop['immunodepression_share'],
            'smokers_share': pop['smokers_share'],
            'alcohol_drinkers_share': pop['alcohol_drinkers_share'],
        }
        return data

    def save_to_json(self, filepath: Union[str, Path]):
        """Salva a configuração atual em JSON (útil para criar templates)."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)

# ============================================================================
# 4. REPOSITÓRIO DE PARÂMETROS
# ============================================================================

class ParameterStore:
    """
    Acesso somente-leitura aos parâmetros do cenário, por nome.

    Dois parâmetros são "ajustáveis" (infection_probability e
    average_room_ventilation_rate): ficam num mapa separado que um laço
    de calibração externo pode sobrescrever durante a execução.
    """

    TUNABLE = ("infection_probability", "average_room_ventilation_rate")

    def __init__(self, config: ScenarioConfig):
        self.config = config
        pop = config.population
        epi = config.epidemiology
        cal = config.calibration
        self._values: Dict[str, float] = {
            "exposed_count": pop.exposed_count,
            "susceptible_count": pop.susceptible_count,
            "immunodepression_share": pop.immunodepression_share,
            "smokers_share": pop.smokers_share,
            "alcohol_drinkers_share": pop.alcohol_drinkers_share,
            "average_room_volume": config.room.average_room_volume,
            "mean_incubation_period": epi.mean_incubation_period,
            "incubation_shape": epi.incubation_shape,
            "mean_diagnosis_delay": epi.mean_diagnosis_delay,
            "treatment_dropout_rate": epi.treatment_dropout_rate,
            "treatment_duration": epi.treatment_duration,
            "days_to_full_recovery": epi.days_to_full_recovery,
            "incidence_rate_goal": cal.incidence_rate_goal,
            "exposure_rate_goal": cal.exposure_rate_goal,
            "epsilon": cal.epsilon,
            "learning_rate": cal.learning_rate,
            "discount_factor": cal.discount_factor,
        }
        self._tunable: Dict[str, float] = {
            "infection_probability": epi.infection_probability,
            "average_room_ventilation_rate": config.room.average_room_ventilation_rate,
        }

    def get(self, parameter_id: str) -> float:
        """Retorna o valor de um parâmetro (ajustável ou fixo)."""
        if parameter_id in self._tunable:
            return self._tunable[parameter_id]
        try:
            return self._values[parameter_id]
        except KeyError:
            raise KeyError(f"Parâmetro desconhecido: {parameter_id}") from None

    def set_parameter_value(self, parameter_id: str, value: float):
        """Sobrescreve um parâmetro ajustável."""
        if parameter_id not in self._tunable:
            raise KeyError(f"Parâmetro não ajustável: {parameter_id}")
        _TUNABLE_CHECKS[parameter_id](parameter_id, value)
        logger.debug(f"Parâmetro {parameter_id}: {self._tunable[parameter_id]} -> {value}")
        self._tunable[parameter_id] = float(value)

    @property
    def tunable_parameters(self) -> Dict[str, float]:
        return dict(self._tunable)

    # Atalhos tipados usados pelo Randomizer
    @property
    def infection_probability(self) -> float:
        return self._tunable["infection_probability"]

    @property
    def average_room_ventilation_rate(self) -> float:
        return self._tunable["average_room_ventilation_rate"]

    @property
    def average_room_volume(self) -> float:
        return self._values["average_room_volume"]

    @property
    def treatment_dropout_rate(self) -> float:
        return self._values["treatment_dropout_rate"]

# ============================================================================
# 5. PRESETS ESTÁTICOS (Geradores de Default)
# ============================================================================

def get_default_city_config() -> ScenarioConfig:
    """Gera a configuração padrão de uma vizinhança urbana em memória."""
    return ScenarioConfig(
        name="Bairro Padrão",
        description="Vizinhança urbana com casos índice de tuberculose latente",
        duration_days=365.0,
        population=PopulationConfig(susceptible_count=1000, exposed_count=10),
        grid=GridConfig(50, 50),
        seed=42
    )

# ============================================================================
# 6. DYNAMIC FACTORIES (Para compatibilidade com Testes e CLI)
# ============================================================================

def create_city_scenario(susceptible: int = 1000, exposed: int = 10,
                         days: float = 365.0, seed: Union[int, None] = 42) -> ScenarioConfig:
    """Cria cenário urbano com parâmetros customizáveis."""
    config = get_default_city_config()
    config.population.susceptible_count = susceptible
    config.population.exposed_count = exposed
    config.duration_days = days
    config.seed = seed
    return config
