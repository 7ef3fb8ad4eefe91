"""End-to-end tip model pipeline."""

from .tip_pipeline import TipModelPipeline
