"""Generative AI collaborator for the analysis pipeline."""

from app.services.ai.client import AnalysisBundle, OnboardingAIClient, call_with_retry

__all__ = ["AnalysisBundle", "OnboardingAIClient", "call_with_retry"]
