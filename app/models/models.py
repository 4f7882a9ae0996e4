"""
SQLAlchemy models for the recommendation system
Users, preferences and interaction logs are written by other services;
this service reads them and writes personalized_recommendations.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Float, Boolean, Index

from app.core.database import Base


class UserPreference(Base):
    """
    Learned or stated preference of a user, e.g. destination_category=beach
    """
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    preference_type = Column(String(64), nullable=False)
    preference_value = Column(String(255), nullable=False)
    preference_weight = Column(Float, default=1.0, nullable=False)
    confidence_score = Column(Float, default=0.5, nullable=False)
    learning_source = Column(String(64), nullable=False, default="explicit_input")
    context_data = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("unique_user_preference_idx", "user_id", "preference_type", "preference_value"),
    )


class UserInteraction(Base):
    """
    Interaction log: one row per view/like/book/... of a catalog item
    """
    __tablename__ = "user_interactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    session_id = Column(String(64), nullable=False, default="")
    interaction_type = Column(String(32), nullable=False, index=True)
    target_type = Column(String(32), nullable=False)
    target_id = Column(String(64), nullable=False, index=True)
    interaction_value = Column(Float)
    context_data = Column(JSON)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("user_interactions_user_time_idx", "user_id", "timestamp"),
    )


class UserCluster(Base):
    """
    Peer-group membership computed offline
    """
    __tablename__ = "user_clusters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    cluster_id = Column(String(64), nullable=False, index=True)
    cluster_name = Column(String(128))
    similarity_score = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)


class Place(Base):
    """
    Destination catalog entry
    """
    __tablename__ = "places"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(64))
    photo_url = Column(String(512))
    price_level = Column(Integer)  # 1-4
    rating = Column(Float)
    review_count = Column(Integer)
    latitude = Column(Float, index=True)
    longitude = Column(Float, index=True)
    address = Column(String(512))
    source = Column(String(64))
    verified = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class Trip(Base):
    """
    Prepackaged trip
    """
    __tablename__ = "trips"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    trip_type = Column(String(64))
    status = Column(String(32), index=True)
    budget_total = Column(Float)
    budget_currency = Column(String(8), default="USD")
    destinations = Column(JSON)
    start_date = Column(DateTime)
    end_date = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class PersonalizedRecommendation(Base):
    """
    Cached top-N recommendations per user (soft expiry)
    """
    __tablename__ = "personalized_recommendations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    recommendation_type = Column(String(32), nullable=False)
    context_hash = Column(String(64), nullable=False)
    recommendations = Column(JSON, nullable=False)
    confidence_scores = Column(JSON)
    generation_algorithm = Column(String(64), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
