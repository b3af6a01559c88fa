"""Pipeline module for locale runs."""

from newsdesk.pipeline.base import Pipeline, PipelineRun
from newsdesk.pipeline.report import ReportPipeline

__all__ = [
    "Pipeline",
    "PipelineRun",
    "ReportPipeline",
]
