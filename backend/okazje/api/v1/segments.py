"""Behavior score and user segment API endpoints.

Used by the admin personalization dashboard and by feed generation.
"""

from fastapi import APIRouter, Depends, Query

from okazje.dependencies import get_behavior_scorer, get_segment_classifier
from okazje.schemas.common import ApiResponse
from okazje.services.behavior_scoring import BehaviorScorer
from okazje.services.segmentation import SegmentClassifier

router = APIRouter()


@router.get("/users/{user_id}/behavior-scores", response_model=ApiResponse)
async def get_behavior_scores(
    user_id: str,
    scorer: BehaviorScorer = Depends(get_behavior_scorer),
):
    """Get the user's stored behavior scores, computing them if absent."""
    record = await scorer.get_or_calculate(user_id)
    return ApiResponse(status="success", data=record.model_dump(mode="json"))


@router.post("/users/{user_id}/behavior-scores/recalculate", response_model=ApiResponse)
async def recalculate_behavior_scores(
    user_id: str,
    scorer: BehaviorScorer = Depends(get_behavior_scorer),
):
    """Recompute the user's behavior scores from recent interactions."""
    record = await scorer.calculate_behavior_scores(user_id)
    return ApiResponse(status="success", data=record.model_dump(mode="json"))


@router.get("/users/{user_id}/segment", response_model=ApiResponse)
async def get_user_segment(
    user_id: str,
    force: bool = Query(False, description="Reclassify even if the cached segment is fresh"),
    classifier: SegmentClassifier = Depends(get_segment_classifier),
):
    """Get the user's segment (cached for 7 days)."""
    segment = await classifier.get_user_segment(user_id, force_recalculate=force)
    return ApiResponse(status="success", data=segment.model_dump(mode="json", exclude_none=True))


@router.post("/users/{user_id}/segment/reclassify", response_model=ApiResponse)
async def reclassify_user(
    user_id: str,
    classifier: SegmentClassifier = Depends(get_segment_classifier),
):
    """Reclassify a user immediately (admin action)."""
    segment = await classifier.classify_user_segment(user_id)
    return ApiResponse(status="success", data=segment.model_dump(mode="json", exclude_none=True))


@router.get("/segments/distribution", response_model=ApiResponse)
async def segment_distribution(
    classifier: SegmentClassifier = Depends(get_segment_classifier),
):
    """Number of users assigned to each segment."""
    distribution = await classifier.get_segment_distribution()
    return ApiResponse(status="success", data=distribution)


@router.get("/segments/{segment_type}/users", response_model=ApiResponse)
async def users_by_segment(
    segment_type: str,
    limit: int = Query(100, ge=1, le=500, description="Maximum users to return"),
    classifier: SegmentClassifier = Depends(get_segment_classifier),
):
    """List users of one segment, most confident assignments first."""
    segments = await classifier.get_users_by_segment(segment_type, limit=limit)
    return ApiResponse(
        status="success",
        data=[s.model_dump(mode="json", exclude_none=True) for s in segments],
    )
