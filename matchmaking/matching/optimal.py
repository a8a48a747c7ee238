"""
Optimal pairing over eligible pairs.

Uses NetworkX's max_weight_matching (Blossom algorithm) on the general,
non-bipartite graph of participants, where each eligible pair is an edge
weighted by its pair score. Gender-compatibility graphs can contain odd
cycles, so a bipartite assignment solver does not apply.

Weights are scaled to integers (score * weight_scale) so the matching runs
on exact arithmetic.
"""

import logging
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import networkx as nx

from ..exceptions import ConfigurationError, MatchingInvariantError
from ..schema import Match, PairScore, UnmatchedReason, UnmatchedRecord, pair_key

logger = logging.getLogger(__name__)


@dataclass
class MatcherConfig:
    """
    Configuration for the optimal matcher.

    Attributes:
        weight_scale: Multiplier applied to pair scores before rounding to integers
        max_cardinality: Prefer more matches over higher total weight
    """
    weight_scale: int = 1000
    max_cardinality: bool = False

    def validate(self) -> None:
        """Validate configuration values."""
        if self.weight_scale < 1:
            raise ConfigurationError(f"weight_scale must be >= 1, got {self.weight_scale}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatcherConfig":
        """Create from main config dictionary."""
        matching = config.get("matching", {})
        return cls(
            weight_scale=int(matching.get("weight_scale", 1000)),
            max_cardinality=bool(matching.get("max_cardinality", False))
        )


@dataclass
class MatchingResult:
    """Selected matches and per-participant diagnostics for everyone left out."""
    matches: List[Match] = field(default_factory=list)
    unmatched: List[UnmatchedRecord] = field(default_factory=list)
    total_weight: int = 0

    @property
    def total_score(self) -> float:
        return float(sum(m.pair_score for m in self.matches))


class OptimalMatcher:
    """
    General maximum-weight matcher.

    Attributes:
        config: MatcherConfig
    """

    def __init__(self, config: Optional[MatcherConfig] = None):
        self.config = config or MatcherConfig()
        self.config.validate()

    def edge_weight(self, score: float) -> int:
        return int(round(score * self.config.weight_scale))

    def _build_graph(self, participant_ids: Sequence[str], eligible_pairs: Sequence[PairScore]) -> nx.Graph:
        """
        Build the weighted participant graph.

        Every participant is a node, including those with no eligible pair.

        Raises:
            MatchingInvariantError: If an edge would carry a negative weight
        """
        graph = nx.Graph()
        graph.add_nodes_from(participant_ids)

        for ps in sorted(eligible_pairs, key=lambda p: p.key):
            weight = self.edge_weight(ps.score)
            if weight < 0:
                raise MatchingInvariantError(
                    f"Negative edge weight {weight} for pair ({ps.participant_a_id}, {ps.participant_b_id})"
                )
            graph.add_edge(ps.participant_a_id, ps.participant_b_id, weight=weight)

        return graph

    def _check_invariants(
        self,
        matching: Iterable[Tuple[str, str]],
        participant_ids: Set[str],
        eligible: Mapping[Tuple[str, str], PairScore]
    ) -> None:
        """Every vertex used at most once, no self-pairs, every edge eligible."""
        seen: Set[str] = set()
        for a, b in matching:
            if a == b:
                raise MatchingInvariantError(f"Participant {a} matched with themselves")
            for pid in (a, b):
                if pid not in participant_ids:
                    raise MatchingInvariantError(f"Matched unknown participant {pid}")
                if pid in seen:
                    raise MatchingInvariantError(f"Participant {pid} assigned to more than one match")
                seen.add(pid)
            if pair_key(a, b) not in eligible:
                raise MatchingInvariantError(f"Selected pair ({a}, {b}) is not an eligible pair")

    def match(
        self,
        participant_ids: Sequence[str],
        eligible_pairs: Sequence[PairScore],
        rejections: Optional[Mapping[str, Any]] = None
    ) -> MatchingResult:
        """
        Compute the maximum-weight set of vertex-disjoint eligible pairs.

        Args:
            participant_ids: Every participant in the run, in input order
            eligible_pairs: Pairs that passed eligibility
            rejections: Optional eligibility rejection code per participant,
                copied onto NO_ELIGIBLE_PAIRS records

        Returns:
            MatchingResult; every participant appears in exactly one match or
            one unmatched record

        Raises:
            MatchingInvariantError: If the computed matching is invalid
        """
        rejections = rejections or {}
        eligible = {ps.key: ps for ps in eligible_pairs}
        graph = self._build_graph(participant_ids, eligible_pairs)

        if graph.number_of_edges() == 0:
            matching: Set[Tuple[str, str]] = set()
        else:
            matching = nx.max_weight_matching(graph, maxcardinality=self.config.max_cardinality)

        self._check_invariants(matching, set(participant_ids), eligible)

        order = {pid: i for i, pid in enumerate(participant_ids)}
        result = MatchingResult()
        matched: Set[str] = set()
        for a, b in matching:
            if order[a] > order[b]:
                a, b = b, a
            ps = eligible[pair_key(a, b)]
            result.matches.append(Match(participant_a_id=a, participant_b_id=b, pair_score=ps.score))
            result.total_weight += self.edge_weight(ps.score)
            matched.update((a, b))
        result.matches.sort(key=lambda m: order[m.participant_a_id])

        best = self._best_partners(eligible_pairs)
        for pid in participant_ids:
            if pid in matched:
                continue
            if pid in best:
                partner, score = best[pid]
                result.unmatched.append(UnmatchedRecord(
                    participant_id=pid,
                    reason=UnmatchedReason.LOST_IN_OPTIMIZATION,
                    best_possible_score=score,
                    best_possible_partner_id=partner
                ))
            else:
                rejection = rejections.get(pid)
                result.unmatched.append(UnmatchedRecord(
                    participant_id=pid,
                    reason=UnmatchedReason.NO_ELIGIBLE_PAIRS,
                    rejection=getattr(rejection, "value", rejection)
                ))

        if 2 * len(result.matches) + len(result.unmatched) != len(participant_ids):
            raise MatchingInvariantError(
                f"Conservation violated: {len(result.matches)} matches, {len(result.unmatched)} unmatched, "
                f"{len(participant_ids)} participants"
            )

        logger.info(
            f"Optimal matching: {len(result.matches)} matches, {len(result.unmatched)} unmatched, "
            f"total score {result.total_score:.2f}"
        )
        return result

    @staticmethod
    def _best_partners(eligible_pairs: Sequence[PairScore]) -> Dict[str, Tuple[str, float]]:
        """Highest-scoring eligible partner per participant (ties broken by partner id)."""
        best: Dict[str, Tuple[str, float]] = {}
        for ps in eligible_pairs:
            for pid in (ps.participant_a_id, ps.participant_b_id):
                partner = ps.partner_of(pid)
                current = best.get(pid)
                if current is None or ps.score > current[1] or (ps.score == current[1] and partner < current[0]):
                    best[pid] = (partner, ps.score)
        return best
