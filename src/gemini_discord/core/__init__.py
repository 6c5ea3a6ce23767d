"""Core components of the answer pipeline."""

from .assembler import EvidenceAssembler
from .classifier import IntentClassifier
from .orchestrator import ConversationOrchestrator

__all__ = ["ConversationOrchestrator", "EvidenceAssembler", "IntentClassifier"]
