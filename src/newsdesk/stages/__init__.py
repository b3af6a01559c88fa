"""Pipeline stages, in execution order."""

from newsdesk.stages.classification import ClassificationStage, ClassificationSummary
from newsdesk.stages.composition import CompositionStage, FrameCountMismatchError, build_article
from newsdesk.stages.deduplication import DeduplicationStage
from newsdesk.stages.fabrication import FabricationStage, fabrication_quota, placement_time
from newsdesk.stages.ingestion import IngestionStage

__all__ = [
    "ClassificationStage",
    "ClassificationSummary",
    "CompositionStage",
    "DeduplicationStage",
    "FabricationStage",
    "FrameCountMismatchError",
    "IngestionStage",
    "build_article",
    "fabrication_quota",
    "placement_time",
]
