"""
Agendador de Eventos Discretos (EventScheduler).

Responsabilidade:
- Manter a fila de eventos futuros ordenada por tick.
- Despachar eventos para os agentes, um de cada vez, em ordem não-decrescente.
- Registrar eventos únicos (one-time) e recorrentes (com handle cancelável).

Ordem de despacho:
    (tick, prioridade, sequência de registro)

Eventos são payloads marcados (EventType + agente alvo). O agente recebe
o evento em `handle_event(event_type)`; nenhuma reflexão por nome de método.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Eventos que um cidadão sabe tratar."""
    WAKE_UP = "wake_up"
    RETURN_HOME = "return_home"
    EXPEL_PARTICLES = "expel_particles"
    TO_INFECTED = "transition_to_infected"
    TO_ON_TREATMENT = "transition_to_on_treatment"
    TO_IMMUNE = "transition_to_immune"
    TO_SUSCEPTIBLE = "transition_to_susceptible"


class EventPriority(IntEnum):
    """Desempate entre eventos do mesmo tick (menor = antes)."""
    HIGH = 0
    DEFAULT = 1


class EventHandle:
    """Token opaco de um registro recorrente ainda pendente."""

    __slots__ = ("_id", "_active")

    def __init__(self, handle_id: int):
        self._id = handle_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def __repr__(self):
        state = "active" if self._active else "cancelled"
        return f"EventHandle({self._id}, {state})"


@dataclass(order=True)
class ScheduledEvent:
    tick: float
    priority: int
    sequence: int
    agent: Any = field(compare=False)
    event_type: EventType = field(compare=False)
    interval: Optional[float] = field(default=None, compare=False)
    handle: Optional[EventHandle] = field(default=None, compare=False)

    @property
    def is_recurring(self) -> bool:
        return self.handle is not None

    @property
    def is_live(self) -> bool:
        return self.handle is None or self.handle.active


class EventScheduler:
    """
    Fila de prioridade (heap) de eventos futuros.

    Atributos:
        now (float): Tick corrente do relógio simulado.
        dispatched (int): Total de eventos já despachados.
    """

    def __init__(self, start_tick: float = 0.0):
        self.now = float(start_tick)
        self.dispatched = 0
        self._queue: List[ScheduledEvent] = []
        self._sequence = itertools.count()
        self._handle_ids = itertools.count(1)

    # ========================================================================
    # REGISTRO
    # ========================================================================

    def schedule_once(self, delay_ticks: float, agent: Any, event_type: EventType,
                      priority: EventPriority = EventPriority.DEFAULT) -> ScheduledEvent:
        """Agenda um evento único `delay_ticks` após o tick corrente."""
        if delay_ticks < 0:
            raise ValueError(f"Atraso negativo: {delay_ticks}")
        event = ScheduledEvent(
            tick=self.now + delay_ticks,
            priority=int(priority),
            sequence=next(self._sequence),
            agent=agent,
            event_type=event_type
        )
        heapq.heappush(self._queue, event)
        return event

    def schedule_recurring(self, start_offset: float, agent: Any, interval_ticks: float,
                           event_type: EventType,
                           priority: EventPriority = EventPriority.DEFAULT) -> EventHandle:
        """
        Agenda um evento recorrente.

        Args:
            start_offset: Ticks até o primeiro disparo (a partir de `now`).
            agent: Agente alvo.
            interval_ticks: Período entre disparos.
            event_type: Evento a despachar.

        Returns:
            EventHandle: Token para cancelamento.
        """
        if start_offset < 0:
            raise ValueError(f"Início negativo: {start_offset}")
        if interval_ticks <= 0:
            raise ValueError(f"Intervalo deve ser positivo: {interval_ticks}")
        handle = EventHandle(next(self._handle_ids))
        event = ScheduledEvent(
            tick=self.now + start_offset,
            priority=int(priority),
            sequence=next(self._sequence),
            agent=agent,
            event_type=event_type,
            interval=interval_ticks,
            handle=handle
        )
        heapq.heappush(self._queue, event)
        return handle

    def cancel(self, handle: Optional[EventHandle]):
        """
        Cancela um registro recorrente. Idempotente: handles desconhecidos,
        nulos ou já cancelados são ignorados. A entrada na fila é descartada
        quando chegar ao topo.
        """
        if handle is None or not handle.active:
            return
        handle._active = False

    # ========================================================================
    # DESPACHO
    # ========================================================================

    def peek_tick(self) -> Optional[float]:
        """Tick do próximo evento vivo (None se a fila estiver vazia)."""
        self._discard_cancelled()
        return self._queue[0].tick if self._queue else None

    def step(self) -> Optional[ScheduledEvent]:
        """Despacha o próximo evento vivo e o retorna."""
        self._discard_cancelled()
        if not self._queue:
            return None

        event = heapq.heappop(self._queue)
        self.now = event.tick

        # O próximo disparo é registrado antes do despacho para preservar
        # a posição do evento recorrente na fila
        if event.is_recurring:
            heapq.heappush(self._queue, ScheduledEvent(
                tick=event.tick + event.interval,
                priority=event.priority,
                sequence=next(self._sequence),
                agent=event.agent,
                event_type=event.event_type,
                interval=event.interval,
                handle=event.handle
            ))

        event.agent.handle_event(event.event_type)
        self.dispatched += 1
        return event

    def run_until(self, tick: float) -> int:
        """
        Despacha todos os eventos com tick <= `tick` e avança o relógio.

        Returns:
            int: Número de eventos despachados.
        """
        count = 0
        while True:
            next_tick = self.peek_tick()
            if next_tick is None or next_tick > tick:
                break
            self.step()
            count += 1
        self.now = max(self.now, float(tick))
        return count

    # ========================================================================
    # INSPEÇÃO
    # ========================================================================

    def pending_events(self, agent: Any = None) -> List[ScheduledEvent]:
        """Eventos vivos ainda na fila (opcionalmente de um agente), em ordem."""
        return sorted(
            e for e in self._queue
            if e.is_live and (agent is None or e.agent is agent)
        )

    def pending_count(self) -> int:
        return sum(1 for e in self._queue if e.is_live)

    def _discard_cancelled(self):
        while self._queue and not self._queue[0].is_live:
            heapq.heappop(self._queue)
