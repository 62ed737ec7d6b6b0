"""Translate service dataclasses into API schemas."""

from __future__ import annotations

from rate_my_decision.db.time import as_utc
from rate_my_decision.schemas.decision import (
    CategoriesOut,
    DecisionEnvelope,
    DecisionOut,
    DecisionStatsOut,
    EmojiCountOut,
    RecommendationOut,
)
from rate_my_decision.schemas.response import ResponseCardOut
from rate_my_decision.schemas.vote import VoteSummaryOut
from rate_my_decision.services.decisions import DecisionDetail, ResponseCard
from rate_my_decision.services.scoring import VoteSummary


def vote_summary_fields(summary: VoteSummary) -> dict[str, int]:
    return {
        "score": summary.score,
        "upvotes": summary.upvotes,
        "downvotes": summary.downvotes,
        "my_vote": summary.my_vote,
    }


def _response_card(card: ResponseCard) -> ResponseCardOut:
    response = card.response
    return ResponseCardOut(
        id=str(response.id),
        rating=response.rating,
        suggestion=response.suggestion,
        emoji=response.emoji,
        comment=response.comment,
        created_at=as_utc(response.created_at),
        **vote_summary_fields(card.votes),
    )


def decision_envelope(detail: DecisionDetail) -> DecisionEnvelope:
    """Build the full decision page payload."""
    decision = detail.decision
    stats = detail.stats
    recommendation = detail.recommendation
    return DecisionEnvelope(
        decision=DecisionOut(
            id=str(decision.id),
            slug=decision.slug,
            title=decision.title,
            description=decision.description,
            closes_at=as_utc(decision.closes_at) if decision.closes_at else None,
            created_at=as_utc(decision.created_at),
        ),
        stats=DecisionStatsOut(
            response_count=stats.response_count,
            rating_counts=list(stats.rating_counts),
            avg_rating=stats.avg_rating,
            net_sentiment=stats.net_sentiment,
            categories=CategoriesOut(
                do_it=stats.categories.do_it,
                dont_do_it=stats.categories.dont_do_it,
                mixed=stats.categories.mixed,
            ),
            emoji_counts=[
                EmojiCountOut(emoji=item.emoji, count=item.count) for item in stats.emoji_counts
            ],
            top_emoji=stats.top_emoji,
        ),
        recommendation=RecommendationOut(
            decision=recommendation.decision,
            score=recommendation.score,
            suggestion_score=recommendation.suggestion_score,
            rating_score=recommendation.rating_score,
            comment_sentiment=recommendation.comment_sentiment,
            post_vote_score=recommendation.post_vote_score,
        ),
        post_vote=VoteSummaryOut(**vote_summary_fields(detail.post_vote)),
        viewer_has_responded=detail.viewer_has_responded,
        responses=[_response_card(card) for card in detail.responses],
    )
