"""Move selection strategies.

Strategies are consulted in priority order by a :class:`StrategySelector`.
The chain endgame strategy runs first and short-circuits; the alpha-beta
search strategy answers every other position.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .board import GameState, Move, Player, available_moves
from .chains import ENDGAME_MOVE_THRESHOLD, best_endgame_move, chains, estimate_final_score_diff
from .search import AlphaBetaSearcher, SearchLimits


@dataclass
class StrategyContext:
    """Snapshot of position metrics used by move strategies."""

    legal_moves_count: int
    current_player: Player = Player.AI
    score_diff: int = 0
    chain_lengths: List[int] = field(default_factory=list)
    endgame: bool = False
    time_controls: Optional[Dict[str, int]] = None

    @property
    def longest_chain(self) -> int:
        return max(self.chain_lengths, default=0)

    def summary(self) -> str:
        return (
            f"legal_moves={self.legal_moves_count} score_diff={self.score_diff} "
            f"chains={self.chain_lengths} longest={self.longest_chain} endgame={self.endgame}"
        )


@dataclass
class StrategyResult:
    """Container describing the outcome of a strategy evaluation."""

    move: Optional[Move]
    strategy_name: str
    score: Optional[float] = None
    confidence: Optional[float] = None
    metadata: Dict[str, object] = field(default_factory=dict)


def create_strategy_context(
    state: GameState,
    time_controls: Optional[Dict[str, int]] = None,
    *,
    endgame_move_threshold: int = ENDGAME_MOVE_THRESHOLD,
) -> StrategyContext:
    legal_moves_count = len(available_moves(state))
    chain_lengths = chains(state)
    endgame = legal_moves_count <= endgame_move_threshold and any(
        length >= 1 for length in chain_lengths
    )
    return StrategyContext(
        legal_moves_count=legal_moves_count,
        current_player=state.current_player,
        score_diff=state.score_diff(),
        chain_lengths=chain_lengths,
        endgame=endgame,
        time_controls=dict(time_controls) if time_controls else None,
    )


class MoveStrategy(ABC):
    """Base class for all move selection strategies."""

    def __init__(
        self,
        name: Optional[str] = None,
        priority: int = 0,
        confidence: Optional[float] = None,
        short_circuit: bool = True,
    ):
        self.name = name or self.__class__.__name__
        self.priority = priority
        self.confidence = confidence
        self.short_circuit = short_circuit

    @abstractmethod
    def is_applicable(self, context: StrategyContext) -> bool:
        """Return whether the strategy should be considered in the given context."""

    @abstractmethod
    def generate_move(
        self, state: GameState, context: StrategyContext
    ) -> Optional[StrategyResult]:
        """Produce a move suggestion when applicable."""


# Toggle individual strategies by flipping these booleans.
STRATEGY_ENABLE_FLAGS = {
    "chain_endgame": True,
    "alpha_beta": True,
    "fallback_random": False,
}


class StrategySelector:
    """Manages strategy registration and selection for the engine."""

    def __init__(
        self,
        strategies: Optional[Iterable[MoveStrategy]] = None,
        selection_policy: Optional[Callable[..., Optional[StrategyResult]]] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        self._strategies: List[MoveStrategy] = []
        self._logger = logger or (lambda message: None)
        self._selection_policy = selection_policy or self._default_selection_policy
        self._uses_default_policy = selection_policy is None
        if strategies:
            for strategy in strategies:
                self.register_strategy(strategy)

    def register_strategy(self, strategy: MoveStrategy) -> None:
        """Register a strategy and maintain priority ordering."""

        self._strategies.append(strategy)
        self._strategies.sort(key=lambda item: item.priority, reverse=True)
        self._logger(f"strategy registered: {strategy.name} (priority={strategy.priority})")

    def clear_strategies(self) -> None:
        self._strategies.clear()

    def get_strategies(self) -> Tuple[MoveStrategy, ...]:
        return tuple(self._strategies)

    def set_selection_policy(
        self,
        policy: Optional[Callable[..., Optional[StrategyResult]]],
    ) -> None:
        if policy is None:
            self._selection_policy = self._default_selection_policy
            self._uses_default_policy = True
        else:
            self._selection_policy = policy
            self._uses_default_policy = False
        self._logger("strategy selection policy updated")

    def select_move(
        self, state: GameState, context: StrategyContext
    ) -> Optional[StrategyResult]:
        """Evaluate registered strategies and choose a result using the selection policy."""

        self._logger(f"strategy context: {context.summary()}")
        strategy_results: List[Tuple[MoveStrategy, StrategyResult]] = []
        for strategy in self._strategies:
            if not strategy.is_applicable(context):
                self._logger(f"strategy skipped (not applicable): {strategy.name}")
                continue

            self._logger(f"strategy evaluating: {strategy.name}")
            try:
                result = strategy.generate_move(state, context)
            except Exception as exc:
                self._logger(f"strategy error in {strategy.name}: {exc}")
                continue

            if result is None:
                self._logger(f"strategy produced no result: {strategy.name}")
                continue

            strategy_results.append((strategy, result))
            if result.move is not None and strategy.short_circuit and self._uses_default_policy:
                return result

        if not strategy_results:
            self._logger("no strategies produced a move suggestion")

        return self._selection_policy(strategy_results, state=state, context=context)

    @staticmethod
    def _default_selection_policy(
        strategy_results: List[Tuple[MoveStrategy, StrategyResult]],
        **_: Any,
    ) -> Optional[StrategyResult]:
        for _, result in strategy_results:
            if result.move is not None:
                return result
        return None

    @staticmethod
    def priority_score_selection_policy(
        strategy_results: List[Tuple[MoveStrategy, StrategyResult]],
        **_: Any,
    ) -> Optional[StrategyResult]:
        """Pick the result with the highest (priority, score, confidence) tuple."""

        best_result: Optional[StrategyResult] = None
        best_key: Optional[Tuple[float, float, float]] = None
        for strategy, result in strategy_results:
            if result.move is None:
                continue
            score = float(result.score) if result.score is not None else 0.0
            confidence = float(result.confidence) if result.confidence is not None else 0.0
            key = (float(strategy.priority), score, confidence)
            if best_key is None or key > best_key:
                best_key = key
                best_result = result
        return best_result


class ChainEndgameStrategy(MoveStrategy):
    def __init__(self, logger: Optional[Callable[[str], None]] = None, **kwargs):
        super().__init__(priority=100, short_circuit=True, **kwargs)
        self._logger = logger or (lambda *_: None)

    def is_applicable(self, context: StrategyContext) -> bool:
        return context.endgame and context.legal_moves_count > 0

    def generate_move(
        self, state: GameState, context: StrategyContext
    ) -> Optional[StrategyResult]:
        move = best_endgame_move(state)
        if move is None:
            return None
        self._logger(
            f"chain endgame strategy chose {move} chains={context.chain_lengths}"
        )
        return StrategyResult(
            move=move,
            strategy_name=self.name,
            score=float(estimate_final_score_diff(state)),
            confidence=self.confidence or 0.9,
            metadata={"chains": list(context.chain_lengths), "label": "CE"},
        )


class AlphaBetaSearchStrategy(MoveStrategy):
    def __init__(
        self,
        limits: Optional[SearchLimits] = None,
        logger: Optional[Callable[[str], None]] = None,
        **kwargs,
    ):
        self.log_tag = kwargs.pop("log_tag", "AB")
        super().__init__(priority=70, **kwargs)
        self.limits = limits or SearchLimits()
        self._logger = logger or (lambda *_: None)

    def is_applicable(self, context: StrategyContext) -> bool:
        return context.legal_moves_count > 0

    def generate_move(
        self, state: GameState, context: StrategyContext
    ) -> Optional[StrategyResult]:
        tc = context.time_controls or {}
        limits = self.limits.with_depth(tc.get("depth"))
        budget_ms = limits.resolve_budget(tc)
        searcher = AlphaBetaSearcher(limits, logger=self._logger, log_tag=self.log_tag)
        info = searcher.iterative_deepening(state, SearchLimits.deadline_after(budget_ms))
        if info.move is None:
            return None
        return StrategyResult(
            move=info.move,
            strategy_name=self.name,
            score=info.value,
            confidence=self.confidence or 0.85,
            metadata={
                "depth": info.depth,
                "nodes": info.nodes,
                "time": info.elapsed,
                "interrupted": info.interrupted,
                "label": self.log_tag,
            },
        )


class FallbackRandomStrategy(MoveStrategy):
    def __init__(self, rng: Optional[random.Random] = None, **kwargs):
        super().__init__(priority=0, **kwargs)
        self._rng = rng or random.Random()

    def is_applicable(self, context: StrategyContext) -> bool:
        return context.legal_moves_count > 0

    def generate_move(
        self, state: GameState, context: StrategyContext
    ) -> Optional[StrategyResult]:
        moves = available_moves(state)
        if not moves:
            return None
        return StrategyResult(
            move=self._rng.choice(moves),
            strategy_name=self.name,
            confidence=self.confidence,
            metadata={"source": "random_fallback"},
        )


def default_strategies(
    limits: Optional[SearchLimits] = None,
    logger: Optional[Callable[[str], None]] = None,
) -> List[MoveStrategy]:
    strategies: List[MoveStrategy] = []
    if STRATEGY_ENABLE_FLAGS.get("chain_endgame", True):
        strategies.append(ChainEndgameStrategy(name="ChainEndgameStrategy", logger=logger))
    if STRATEGY_ENABLE_FLAGS.get("alpha_beta", True):
        strategies.append(
            AlphaBetaSearchStrategy(limits=limits, name="AlphaBetaSearchStrategy", logger=logger)
        )
    if STRATEGY_ENABLE_FLAGS.get("fallback_random", False):
        strategies.append(FallbackRandomStrategy(name="FallbackRandomStrategy"))
    return strategies


__all__ = [
    "AlphaBetaSearchStrategy",
    "ChainEndgameStrategy",
    "FallbackRandomStrategy",
    "MoveStrategy",
    "STRATEGY_ENABLE_FLAGS",
    "StrategyContext",
    "StrategyResult",
    "StrategySelector",
    "create_strategy_context",
    "default_strategies",
]
