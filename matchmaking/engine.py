"""
Matching engine.

Runs one matching cycle over a participant snapshot:

1. Validate every participant against the question catalog
2. Enumerate candidate pairs and apply the hard filter
3. Score surviving pairs (similarity -> two directional scores -> pair score)
4. Apply eligibility floors
5. Compute the optimal pairing
6. Assemble diagnostics

The engine is a pure function of its input and configuration: it performs
no I/O and keeps no state between runs, so it is safe to call repeatedly
or concurrently.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed

from .comparators import validate_response
from .configs import MatchingConfig
from .eligibility import EligibilityFilter
from .evaluation import (
    PhaseTimer,
    RunDiagnostics,
    compute_reciprocity,
    compute_score_distribution_stats,
    score_histogram,
)
from .exceptions import MalformedInputError
from .filtering import HardFilter
from .fusion import CombinerConfig, PairScoreCombiner
from .matching import OptimalMatcher
from .pair_generation import PairGenerator
from .schema import (
    MatchingOutcome,
    OutcomeStatus,
    PairScore,
    Participant,
    QuestionSpec,
    UnmatchedReason,
    UnmatchedRecord,
)
from .scoring import DirectionalScorer, ScoringConfig, SimilarityEngine

logger = logging.getLogger(__name__)


def score_pair_batch(
    participants: Sequence[Participant],
    batch: Sequence[Tuple[int, int]],
    questions: Sequence[QuestionSpec],
    scoring_config: ScoringConfig,
    combiner_config: CombinerConfig
) -> List[PairScore]:
    """
    Score a batch of surviving index pairs.

    Module-level so it can be shipped to joblib workers.

    Args:
        participants: Participant snapshot
        batch: (i, j) index pairs into `participants`
        questions: Question catalog
        scoring_config: Directional scoring settings
        combiner_config: Pair score combiner settings

    Returns:
        PairScore per pair, in batch order
    """
    similarity = SimilarityEngine(questions)
    scorer = DirectionalScorer(scoring_config, questions)
    combiner = PairScoreCombiner(combiner_config)

    scores_ab = np.empty(len(batch))
    scores_ba = np.empty(len(batch))
    for n, (i, j) in enumerate(batch):
        a, b = participants[i], participants[j]
        similarities = similarity.compute(a, b)
        scores_ab[n] = scorer.score(a, similarities)
        scores_ba[n] = scorer.score(b, similarities)

    pair_scores = combiner.combine_many(scores_ab, scores_ba)
    return [
        PairScore(
            participant_a_id=participants[i].id,
            participant_b_id=participants[j].id,
            score=float(pair_scores[n]),
            score_a_to_b=float(scores_ab[n]),
            score_b_to_a=float(scores_ba[n])
        )
        for n, (i, j) in enumerate(batch)
    ]


class MatchingEngine:
    """
    Compatibility scoring and optimal pairing engine.

    Attributes:
        config: MatchingConfig for every phase
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()
        self.config.validate()
        self.questions = list(self.config.questions)
        self.hard_filter = HardFilter(self.config.hard_filters, self.questions)
        self.eligibility = EligibilityFilter(self.config.eligibility)
        self.matcher = OptimalMatcher(self.config.matcher)
        self.pair_generator = PairGenerator(batch_size=self.config.batch_size)

    def validate_participants(self, participants: Sequence[Participant]) -> None:
        """
        Fail fast on input that cannot be scored.

        Raises:
            MalformedInputError: Naming the participant and field
        """
        seen = set()
        for p in participants:
            if p.id in seen:
                raise MalformedInputError(p.id, "id", "duplicate participant id")
            seen.add(p.id)

            for q in self.questions:
                response = p.response(q.id)
                if response is None:
                    if q.required and not q.hard_filter:
                        raise MalformedInputError(p.id, f"responses.{q.id}", "required response is missing")
                    continue
                validate_response(q, response, p.id)

    def score_pairs(
        self, participants: Sequence[Participant], pairs: Sequence[Tuple[int, int]]
    ) -> List[PairScore]:
        """
        Score pairs, in parallel when n_jobs != 1.

        Results come back in the order of `pairs` regardless of n_jobs.
        """
        if not pairs:
            return []
        batches = self.pair_generator.batches(pairs)
        logger.info(f"Scoring {len(pairs)} pairs in {len(batches)} batches (n_jobs={self.config.n_jobs})")

        results = Parallel(n_jobs=self.config.n_jobs)(
            delayed(score_pair_batch)(
                participants, batch, self.questions, self.config.scoring, self.config.combiner
            )
            for batch in batches
        )
        return [ps for batch_scores in results for ps in batch_scores]

    def _nothing_to_match(self, participants: Sequence[Participant], timer: PhaseTimer) -> MatchingOutcome:
        logger.warning(f"Nothing to match: {len(participants)} participant(s), need at least 2")
        unmatched = [
            UnmatchedRecord(participant_id=p.id, reason=UnmatchedReason.NO_ELIGIBLE_PAIRS)
            for p in participants
        ]
        diagnostics = RunDiagnostics(
            n_participants=len(participants),
            unmatched_by_reason={UnmatchedReason.NO_ELIGIBLE_PAIRS.value: len(unmatched)},
            phase_times_ms=dict(timer.times_ms),
            execution_time_ms=timer.elapsed_ms,
            notes=["nothing to match: fewer than two participants"]
        )
        return MatchingOutcome(status=OutcomeStatus.NOTHING_TO_MATCH, unmatched=unmatched, diagnostics=diagnostics)

    def run(self, participants: Sequence[Participant]) -> MatchingOutcome:
        """
        Run one matching cycle.

        Args:
            participants: Snapshot of every participant in the cycle

        Returns:
            MatchingOutcome in which every participant appears exactly once,
            either in a match or in an unmatched record

        Raises:
            MalformedInputError: If any participant's input cannot be scored
            MatchingInvariantError: If the matcher produces an invalid pairing
        """
        timer = PhaseTimer()
        participants = list(participants)

        with timer.phase("validation"):
            self.validate_participants(participants)

        if len(participants) < 2:
            return self._nothing_to_match(participants, timer)

        logger.info(f"Matching run over {len(participants)} participants")
        ids = [p.id for p in participants]

        with timer.phase("hard_filter"):
            indices_a, indices_b = self.pair_generator.generate_pairs(len(participants))
            hard_report = self.hard_filter.filter_pairs(
                participants, zip(indices_a.tolist(), indices_b.tolist())
            )

        with timer.phase("scoring"):
            pair_scores = self.score_pairs(participants, hard_report.surviving)

        with timer.phase("eligibility"):
            eligibility_report = self.eligibility.apply(ids, pair_scores)

        if not eligibility_report.eligible:
            logger.warning("No eligible pairs; every participant stays unmatched")

        with timer.phase("matching"):
            result = self.matcher.match(ids, eligibility_report.eligible, eligibility_report.rejections)

        scores = [ps.score for ps in pair_scores]
        diagnostics = RunDiagnostics(
            n_participants=len(participants),
            n_candidate_pairs=hard_report.n_evaluated,
            hard_filter=hard_report.to_dict(),
            pair_scores=compute_score_distribution_stats(scores),
            score_histogram=score_histogram(scores),
            directional_asymmetry=compute_score_distribution_stats(
                [abs(ps.score_a_to_b - ps.score_b_to_a) for ps in pair_scores]
            ),
            reciprocity=compute_reciprocity(
                [ps.score_a_to_b for ps in pair_scores], [ps.score_b_to_a for ps in pair_scores]
            ),
            eligibility=eligibility_report.to_dict(),
            perfectionists=list(eligibility_report.perfectionists),
            n_matches=len(result.matches),
            n_matched_participants=2 * len(result.matches),
            unmatched_by_reason={
                reason.value: sum(1 for u in result.unmatched if u.reason == reason)
                for reason in UnmatchedReason
            },
            matched_scores=compute_score_distribution_stats([m.pair_score for m in result.matches]),
            phase_times_ms=dict(timer.times_ms),
            execution_time_ms=timer.elapsed_ms
        )
        logger.info(
            f"Run complete: {diagnostics.n_matches} matches, {len(result.unmatched)} unmatched "
            f"in {diagnostics.execution_time_ms:.1f} ms"
        )

        return MatchingOutcome(
            status=OutcomeStatus.COMPLETED,
            matches=result.matches,
            unmatched=result.unmatched,
            eligible_pairs=eligibility_report.eligible,
            diagnostics=diagnostics
        )


def run_matching(participants: Sequence[Participant], config: Optional[MatchingConfig] = None) -> MatchingOutcome:
    """Convenience wrapper: build an engine and run it once."""
    return MatchingEngine(config).run(participants)
