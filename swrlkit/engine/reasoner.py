"""Forward-chaining reasoner over a rule set.

Rule.apply evaluates a single rule against a fixed snapshot. The
reasoner adds the outer loop: it applies every rule to a private copy of
the store, merges the facts that are new, and repeats until a round adds
nothing (fixpoint) or the iteration limit is reached. The caller's store
is never modified.

It also offers an async batch surface for callers that fan many rule
applications out over a worker pool.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from swrlkit.schema import ReasonerConfig

from .fact_store import Fact, FactStore, InMemoryFactStore
from .inference import Inference
from .rule import Rule

__all__ = [
    "RuleReasoner",
    "ReasoningResult",
]

logger = logging.getLogger(__name__)


@dataclass
class ReasoningResult:
    """Result of running the reasoner to fixpoint.

    Attributes:
        inferences: Inferences whose facts were new, in derivation order
        iterations: Number of rounds run
        facts_total: Facts in the working store after reasoning
        fixpoint: Whether a round completed without new facts
        store: The working store (input facts plus inferences)
    """

    inferences: list[Inference]
    iterations: int
    facts_total: int
    fixpoint: bool
    store: InMemoryFactStore = field(repr=False)

    @property
    def facts(self) -> list[Fact]:
        return [inference.fact for inference in self.inferences]


class RuleReasoner:
    """Applies a rule set to fixpoint.

    Within a round, every rule sees the same snapshot; facts derived in
    a round become visible to all rules in the next one.
    """

    def __init__(
        self,
        rules: Sequence[Rule] = (),
        config: ReasonerConfig | None = None,
    ) -> None:
        """Initialize the reasoner.

        Args:
            rules: Rules to apply, in order
            config: Reasoner settings (defaults apply when omitted)
        """
        self.config = config or ReasonerConfig()
        self._rules: list[Rule] = list(rules)

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def add_rule(self, rule: Rule) -> None:
        self._rules.append(rule)

    def apply_all(self, store: FactStore) -> list[Inference]:
        """Apply every rule once to the same snapshot."""
        inferences: list[Inference] = []
        for rule in self._rules:
            inferences.extend(rule.apply(store))
        return inferences

    def reason(self, store: InMemoryFactStore) -> ReasoningResult:
        """Run all rules to fixpoint over a copy of the store.

        Args:
            store: Input facts (left untouched)

        Returns:
            ReasoningResult with the inferred facts
        """
        working = store.copy()
        reported: list[Inference] = []
        seen: set[Fact] = set()

        for iteration in range(self.config.max_iterations):
            added = 0
            for inference in self.apply_all(working):
                if inference.fact in seen:
                    continue
                seen.add(inference.fact)
                if working.entails(inference.fact):
                    if self.config.include_asserted:
                        reported.append(inference)
                    continue
                working.add_fact(inference.fact)
                reported.append(inference)
                added += 1

            logger.debug(f"Round {iteration + 1}: {added} new facts")
            if not added:
                logger.debug(
                    f"Fixpoint reached in {iteration + 1} rounds, "
                    f"{working.size()} facts"
                )
                return ReasoningResult(
                    inferences=reported,
                    iterations=iteration + 1,
                    facts_total=working.size(),
                    fixpoint=True,
                    store=working,
                )

        logger.warning(f"Max iterations ({self.config.max_iterations}) reached")
        return ReasoningResult(
            inferences=reported,
            iterations=self.config.max_iterations,
            facts_total=working.size(),
            fixpoint=False,
            store=working,
        )

    async def reason_async(self, store: InMemoryFactStore) -> ReasoningResult:
        return await asyncio.to_thread(self.reason, store)

    async def apply_many_async(
        self, applications: Iterable[tuple[Rule, FactStore]]
    ) -> list[list[Inference]]:
        """Run many independent rule applications concurrently.

        At most ``config.max_concurrency`` applications run at once.
        Results are returned in input order; nothing is merged.

        Args:
            applications: (rule, store) pairs, e.g. one rule against one
                seeded store per entity

        Returns:
            Inferences of each application
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def run(rule: Rule, store: FactStore) -> list[Inference]:
            async with semaphore:
                return await rule.apply_async(store)

        tasks = [run(rule, store) for rule, store in applications]
        return list(await asyncio.gather(*tasks))
