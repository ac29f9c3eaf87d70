"""Client-side data pipeline for the churn-risk dashboard."""

__version__ = "0.1.0"
