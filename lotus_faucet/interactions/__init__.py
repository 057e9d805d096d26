"""Interaction handling for lotus-faucet.

This package turns a signed webhook request into a platform response:
- Signature verification
- Command routing
- Parameter validation
- Response composition
- Pipeline orchestration
"""

from lotus_faucet.interactions.pipeline import InteractionPipeline, PipelineResult
from lotus_faucet.interactions.responses import ResponseComposer
from lotus_faucet.interactions.router import InteractionRouter, Route
from lotus_faucet.interactions.validator import ParameterValidator
from lotus_faucet.interactions.verifier import SignatureVerifier

__all__ = [
    "InteractionPipeline",
    "InteractionRouter",
    "ParameterValidator",
    "PipelineResult",
    "ResponseComposer",
    "Route",
    "SignatureVerifier",
]
