"""
Módulo de Gerenciamento do Ambiente Urbano (Environment Facade).

Responsabilidade:
- Ser o único dono das estruturas espaciais (grid discreto + posições contínuas).
- Gerenciar Pontos de Interesse (POIs): domicílios e locais de trabalho.
- Fornecer API de consulta espacial (vizinhança, ocupantes de uma célula).
- Mover agentes mantendo as representações contínua e discreta coerentes.

Padrão de Projeto: Facade / Service Layer.
Os agentes guardam apenas uma referência para consulta; nunca tocam o grid.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from mesa.space import MultiGrid

from .config import GridConfig

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Cell = Tuple[int, int]


@dataclass
class PointOfInterest:
    """Local relevante para o agente (domicílio, local de trabalho)."""
    id: str
    type: str  # 'household', 'workplace'
    real_pos: Point

    @property
    def cell_pos(self) -> Cell:
        return (int(self.real_pos[0]), int(self.real_pos[1]))


class Environment:
    """
    Fachada que gerencia a interação espacial do modelo.

    A posição contínua de cada agente fica num dicionário próprio; a célula
    (truncamento inteiro) é mantida no MultiGrid do Mesa, que também
    atualiza `agent.pos`.
    """

    def __init__(self, config: GridConfig):
        self.width = config.width
        self.height = config.height
        self.grid = MultiGrid(self.width, self.height, torus=False)
        self._positions: Dict[Any, Point] = {}

        self.pois: Dict[str, List[PointOfInterest]] = {
            "household": [],
            "workplace": []
        }
        logger.info(f"Ambiente inicializado: {self.width}x{self.height} células.")

    # ========================================================================
    # PONTOS DE INTERESSE
    # ========================================================================

    def generate_pois(self, poi_type: str, count: int, rng: np.random.Generator) -> List[PointOfInterest]:
        """Distribui `count` POIs uniformemente pela área do grid."""
        xs = rng.uniform(0, self.width, size=count)
        ys = rng.uniform(0, self.height, size=count)
        created = []
        for i, (x, y) in enumerate(zip(xs, ys)):
            poi = PointOfInterest(
                id=f"{poi_type}_{i}",
                type=poi_type,
                real_pos=(float(x), float(y))
            )
            self.add_poi(poi)
            created.append(poi)
        logger.debug(f"{count} POIs do tipo '{poi_type}' gerados.")
        return created

    def add_poi(self, poi: PointOfInterest):
        self.validate_point(poi.real_pos)
        self.pois.setdefault(poi.type, []).append(poi)

    def get_random_poi(self, poi_type: str, rng: np.random.Generator) -> Optional[Point]:
        """Retorna as coordenadas reais de um POI aleatório do tipo pedido."""
        targets = self.pois.get(poi_type, [])
        if not targets:
            return None
        return targets[int(rng.integers(len(targets)))].real_pos

    # ========================================================================
    # API PÚBLICA PARA AGENTES
    # ========================================================================

    def is_within_bounds(self, point: Point) -> bool:
        x, y = point
        return 0 <= x < self.width and 0 <= y < self.height

    def validate_point(self, point: Optional[Point]):
        """Falha cedo para coordenadas ausentes ou fora do grid."""
        if point is None:
            raise ValueError("Coordenada ausente")
        if not self.is_within_bounds(point):
            raise ValueError(f"Coordenada fora do grid {self.width}x{self.height}: {point}")

    def move_to(self, agent: Any, x: float, y: float):
        """Move o agente atualizando posição contínua e célula discreta."""
        cell = (int(x), int(y))
        if agent.pos is None:
            self.grid.place_agent(agent, cell)
        else:
            self.grid.move_agent(agent, cell)
        self._positions[agent] = (x, y)

    def location_of(self, agent: Any) -> Optional[Cell]:
        """Célula atual do agente (None se ainda não posicionado)."""
        return agent.pos

    def position_of(self, agent: Any) -> Optional[Point]:
        """Posição contínua atual do agente."""
        return self._positions.get(agent)

    def occupants(self, cell: Cell) -> List[Any]:
        return self.grid.get_cell_list_contents([cell])

    def neighborhood(self, point: Cell, radius: int = 0,
                     include_self: bool = True) -> List[Tuple[Cell, List[Any]]]:
        """
        Células da vizinhança de Moore com seus ocupantes.

        Com radius=0 a consulta se restringe à própria célula.
        """
        if radius == 0:
            cells = [point] if include_self else []
        else:
            cells = self.grid.get_neighborhood(
                point,
                moore=True,
                include_center=include_self,
                radius=radius
            )
        return [(cell, self.occupants(cell)) for cell in cells]
