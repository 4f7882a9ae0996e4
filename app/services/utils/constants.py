"""
Shared constants for the recommendation pipeline
"""

# Catalog item types
ITEM_DESTINATION = 'destination'
ITEM_ACTIVITY = 'activity'
ITEM_LODGING = 'lodging'
ITEM_FLIGHT = 'flight'
ITEM_TRIP = 'trip'
ITEM_ITINERARY = 'itinerary'

ITEM_TYPES = (ITEM_DESTINATION, ITEM_ACTIVITY, ITEM_LODGING, ITEM_FLIGHT, ITEM_TRIP, ITEM_ITINERARY)

# Feature vector layout: [type code, log price, rating, *category tags]
ITEM_TYPE_CODES = {item_type: code for code, item_type in enumerate(ITEM_TYPES)}
CATEGORY_TAGS = ('beach', 'mountain', 'city', 'culture', 'adventure', 'food', 'nature', 'luxury')
CATEGORY_OFFSET = 3
FEATURE_VECTOR_LENGTH = CATEGORY_OFFSET + len(CATEGORY_TAGS)

# Interaction types
INTERACTION_VIEW = 'view'
INTERACTION_LIKE = 'like'
INTERACTION_DISLIKE = 'dislike'
INTERACTION_SAVE = 'save'
INTERACTION_BOOK = 'book'
INTERACTION_SHARE = 'share'
INTERACTION_SKIP = 'skip'
INTERACTION_SEARCH = 'search'

INTERACTION_WEIGHTS = {
    INTERACTION_VIEW: 0.1,
    INTERACTION_LIKE: 0.8,
    INTERACTION_DISLIKE: -0.8,
    INTERACTION_SAVE: 0.9,
    INTERACTION_BOOK: 1.0,
    INTERACTION_SHARE: 0.7,
    INTERACTION_SKIP: -0.3,
    INTERACTION_SEARCH: 0.2,
}
DEFAULT_INTERACTION_WEIGHT = 0.1

# Behavior vector layout (frequency of each type in the history)
BEHAVIOR_INTERACTION_TYPES = (
    INTERACTION_VIEW, INTERACTION_LIKE, INTERACTION_DISLIKE, INTERACTION_SAVE,
    INTERACTION_BOOK, INTERACTION_SHARE, INTERACTION_SEARCH, INTERACTION_SKIP,
)

HIGH_VALUE_INTERACTIONS = (INTERACTION_LIKE, INTERACTION_SAVE, INTERACTION_BOOK, INTERACTION_SHARE)
TRENDING_INTERACTIONS = (
    INTERACTION_VIEW, INTERACTION_LIKE, INTERACTION_DISLIKE, INTERACTION_SAVE,
    INTERACTION_BOOK, INTERACTION_SHARE, INTERACTION_SKIP,
)
SEEN_INTERACTIONS = (INTERACTION_VIEW, INTERACTION_LIKE, INTERACTION_SAVE, INTERACTION_BOOK)
DECISION_INTERACTIONS = (INTERACTION_LIKE, INTERACTION_DISLIKE, INTERACTION_SAVE, INTERACTION_BOOK)
CONVERSION_INTERACTIONS = (INTERACTION_LIKE, INTERACTION_SAVE, INTERACTION_BOOK)

# Preference types
PREF_DESTINATION_CATEGORY = 'destination_category'
PREF_ACTIVITY_TYPE = 'activity_type'
PREF_TRAVEL_STYLE = 'travel_style'
PERSONALIZATION_PREFERENCE_TYPES = (PREF_DESTINATION_CATEGORY, PREF_ACTIVITY_TYPE, PREF_TRAVEL_STYLE)

# Strategies and fusion weights
STRATEGY_CONTENT_BASED = 'content_based'
STRATEGY_COLLABORATIVE = 'collaborative'
STRATEGY_TRENDING = 'trending'
STRATEGY_WEIGHTS = {
    STRATEGY_CONTENT_BASED: 0.4,
    STRATEGY_COLLABORATIVE: 0.4,
    STRATEGY_TRENDING: 0.2,
}
MIN_STRATEGY_SCORE = 0.1

# Content-based sub-score weights
WEIGHT_FEATURE_SIMILARITY = 0.4
WEIGHT_CATEGORY = 0.3
WEIGHT_LOCATION = 0.2
WEIGHT_BUDGET = 0.1
NEUTRAL_SCORE = 0.5
MAX_PROXIMITY_METERS = 100000.0
UNDER_BUDGET_SCORE = 0.8

# Collaborative
PREFERENCE_SIMILARITY_WEIGHT = 0.6
BEHAVIOR_SIMILARITY_WEIGHT = 0.4

# Trending
TRENDING_TIME_DECAY = 0.8
TRENDING_CONFIDENCE = 0.7

# Post-processing
PERSONALIZATION_BOOST = 0.2
TRAVEL_STYLE_BOOST = 1.15
CROSS_TYPE_SIMILARITY = 0.2
FRESH_WEEK_BOOST = 1.10
FRESH_MONTH_BOOST = 1.05

# Explanations
HIGH_CONFIDENCE_PREFERENCE = 0.8
FREQUENT_TYPE_INTERACTIONS = 5
QUICK_DECISION_SECONDS = 60
MAX_PERSONALIZED_FACTORS = 5
MAX_MATCHING_PREFERENCES = 3

# Cache writer
GENERATION_ALGORITHM = 'intelligent_hybrid_v1'
RECOMMENDATION_TYPE_HYBRID = 'hybrid'

EARTH_RADIUS_METERS = 6371000.0
