from .base import BaseSchema, TimestampedSchema
from .metadata import (
    PlatformMetadata,
    FacebookReviewMetadata,
    InstagramCommentMetadata,
    GooglePlayReviewMetadata,
    GoogleMyBusinessReviewMetadata,
    GooglePlacesReviewMetadata,
    YouTubeCommentMetadata,
    metadata_model_for,
)
from .normalized import NormalizedReview, ExternalReply, NormalizedListing
from .listing import ListingRead, ListingStats
from .review import ReviewResponseRead, ReviewStats, PlatformReviewStats

__all__ = [
    'BaseSchema',
    'TimestampedSchema',
    'PlatformMetadata',
    'FacebookReviewMetadata',
    'InstagramCommentMetadata',
    'GooglePlayReviewMetadata',
    'GoogleMyBusinessReviewMetadata',
    'GooglePlacesReviewMetadata',
    'YouTubeCommentMetadata',
    'metadata_model_for',
    'NormalizedReview',
    'ExternalReply',
    'NormalizedListing',
    'ListingRead',
    'ListingStats',
    'ReviewResponseRead',
    'ReviewStats',
    'PlatformReviewStats',
]
